# Static step catalog: the ordered question sequence and what each step shows.
# The engine only reads "id", "type" and "constraints"; everything else is
# passed through to the client untouched.

STEP_IDS = (
    "gender",
    "age",
    "goal",
    "obstacle",
    "experience",
    "motivation",
    "time",
    "environment",
    "frequency",
    "weight_goal",
    "current_weight",
    "height",
    "social_proof",
    "injury",
    "visualization",
    "format",
    "focus_areas",
    "commitment",
)

WEIGHT_STEP = "current_weight"
HEIGHT_STEP = "height"

STEP_TYPES = ("single_choice", "multi_choice", "numeric", "free_text", "info")


def _option(label, icon=None, description=None):
    option = {"label": label}
    if icon:
        option["icon"] = icon
    if description:
        option["description"] = description
    return option


STEP_DEFINITION = {

    "gender": {
        "id": "gender",
        "text": "Qual é o seu gênero?",
        "type": "single_choice",
        "options": [
            _option("HOMEM"),
            _option("MULHER"),
        ],
        "constraints": {"required": False},
    },

    "age": {
        "id": "age",
        "text": "Qual é a sua idade?",
        "type": "single_choice",
        "options": [
            _option("18 - 29 anos"),
            _option("30 - 39 anos"),
            _option("40 - 49 anos"),
            _option("50+ anos"),
        ],
        "constraints": {"required": False},
    },

    "goal": {
        "id": "goal",
        "text": "Qual é o seu principal objetivo até o Carnaval?",
        "type": "single_choice",
        "options": [
            _option("Secar e Definir", "🔥", "Quero perder gordura e mostrar os músculos"),
            _option("Perder Peso Urgente", "⚖️", "Preciso reduzir medidas o mais rápido possível"),
            _option("Ganhar Massa Magra", "💪", "Quero ficar mais forte e com corpo torneado"),
            _option("Melhorar Condicionamento", "🏃", "Quero ter mais fôlego e energia"),
        ],
        "constraints": {"required": False},
    },

    "obstacle": {
        "id": "obstacle",
        "text": "O que mais te atrapalha hoje?",
        "type": "single_choice",
        "options": [
            _option("Falta de Tempo", "⏰"),
            _option("Preguiça / Falta de Ânimo", "😴"),
            _option("Ansiedade e Compulsão", "🍔"),
            _option("Metabolismo Lento", "🐢"),
            _option("Não sei por onde começar", "🤷"),
        ],
        "constraints": {"required": False},
    },

    "experience": {
        "id": "experience",
        "text": "Qual sua experiência com treinos?",
        "type": "single_choice",
        "options": [
            _option("Sedentário(a)", "🛋️", "Não treino há meses ou anos"),
            _option("Iniciante", "🚶", "Treino de vez em quando, sem regularidade"),
            _option("Intermediário", "🏃", "Treino de 2 a 3 vezes por semana"),
            _option("Avançado", "🏋️", "Treino firme quase todos os dias"),
        ],
        "constraints": {"required": False},
    },

    "motivation": {
        "id": "motivation",
        "text": "O que te motivou a começar agora?",
        "type": "single_choice",
        "options": [
            _option("Quero me sentir bem no biquíni/sunga", "👙"),
            _option("Saúde e disposição", "❤️"),
            _option("Autoestima e confiança", "✨"),
            _option("Um evento específico (Carnaval)", "🎉"),
        ],
        "constraints": {"required": False},
    },

    "time": {
        "id": "time",
        "text": "Quanto tempo você tem por dia?",
        "type": "single_choice",
        "options": [
            _option("15-20 minutos", "⚡", "Treinos expressos e intensos"),
            _option("30-45 minutos", "⏱️", "O ideal para resultados consistentes"),
            _option("Mais de 1 hora", "🕰️", "Tenho tempo de sobra"),
        ],
        "constraints": {"required": False},
    },

    "environment": {
        "id": "environment",
        "text": "Onde você prefere treinar?",
        "type": "single_choice",
        "options": [
            _option("Em Casa", "🏠", "Conforto e praticidade"),
            _option("Na Academia", "🏋️", "Gosto dos equipamentos"),
            _option("Ao Ar Livre", "🌳", "Parques e praças"),
        ],
        "constraints": {"required": False},
    },

    "frequency": {
        "id": "frequency",
        "text": "Quantas vezes na semana pode treinar?",
        "type": "single_choice",
        "options": [
            _option("1 a 2 vezes", "📅"),
            _option("3 a 4 vezes", "📅"),
            _option("5 vezes ou mais", "🔥"),
        ],
        "constraints": {"required": False},
    },

    "weight_goal": {
        "id": "weight_goal",
        "text": "Quanto peso você quer perder?",
        "type": "single_choice",
        "options": [
            _option("2kg a 5kg", "💧"),
            _option("5kg a 10kg", "⚖️"),
            _option("Mais de 10kg", "🚀"),
            _option("Não quero perder peso, só definir", "💪"),
        ],
        "constraints": {"required": False},
    },

    # --- numeric entries: the only gated steps ---
    "current_weight": {
        "id": "current_weight",
        "text": "Qual seu peso atual (kg)?",
        "type": "numeric",
        "hints": {"placeholder": "Ex: 70.5", "unit": "kg"},
        "constraints": {"required": True},
    },

    "height": {
        "id": "height",
        "text": "Qual sua altura?",
        "type": "numeric",
        "hints": {"placeholder": "Ex: 1.65", "unit": "m", "shows_bmi": True},
        "constraints": {"required": True},
    },

    "social_proof": {
        "id": "social_proof",
        "text": "Ótimo! Já entendemos seu perfil.",
        "type": "info",
        "hints": {
            "intro": (
                "Milhares de pessoas com o perfil parecido com o seu já conseguiram "
                "resultados incríveis nas primeiras 2 semanas."
            ),
            "testimonial": {
                "author": "Mariana Costa",
                "rating": 5,
                "quote": (
                    "Eu achava que não tinha tempo, mas o método encaixou certinho "
                    "na minha rotina. Perdi 4kg em 15 dias!"
                ),
            },
            "continue_label": "VAMOS CONTINUAR",
        },
        "constraints": {"required": False},
    },

    "injury": {
        "id": "injury",
        "text": "Você possui alguma lesão?",
        "type": "single_choice",
        "options": [
            _option("Não, sou 100% saudável", "✅"),
            _option("Sim, no Joelho", "🦵"),
            _option("Sim, na Coluna/Costas", "🦴"),
            _option("Sim, no Ombro", "💪"),
            _option("Outra lesão", "⚠️"),
        ],
        "constraints": {"required": False},
    },

    "visualization": {
        "id": "visualization",
        "text": "Como você quer se sentir no Carnaval?",
        "type": "single_choice",
        "options": [
            _option("Confiante para usar qualquer roupa", "👗"),
            _option("Com energia para pular os 4 dias", "🔋"),
            _option("Orgulhosa(o) das minhas fotos", "📸"),
            _option("Sem inchaço e retenção", "💧"),
        ],
        "constraints": {"required": False},
    },

    "format": {
        "id": "format",
        "text": "Prefere receber seu protocolo de treino personalizado por imagens ou textos?",
        "type": "single_choice",
        "options": [
            _option("Textos", "📝"),
            _option("Imagens", "🖼️"),
            _option("Vídeos", "🎥"),
            _option("TODOS", "📦"),
        ],
        "constraints": {"required": False},
    },

    # zero selections is a valid answer here
    "focus_areas": {
        "id": "focus_areas",
        "text": "Quais áreas você quer focar mais?",
        "type": "multi_choice",
        "options": [
            _option("Barriga / Abdômen"),
            _option("Pernas / Coxas"),
            _option("Glúteos"),
            _option("Braços"),
            _option("Costas"),
            _option("Peitoral"),
        ],
        "hints": {"intro": "(Selecione quantas quiser)"},
        "constraints": {"required": False},
    },

    "commitment": {
        "id": "commitment",
        "text": "Última etapa!",
        "type": "single_choice",
        "options": [
            _option("yes", description="SIM, ESTOU COMPROMETIDO(A)!"),
        ],
        "hints": {
            "intro": (
                "Seu plano está quase pronto. Mas precisamos saber: você está realmente "
                "comprometido(a) a seguir o protocolo pelos próximos 30 dias?"
            ),
            "decline_message": "Esse desafio é apenas para quem está decidido a mudar!",
        },
        "constraints": {"required": False},
    },
}


def get_step(step_id, definition=None):
    """Return the catalog node for ``step_id``; raises KeyError for unknown ids."""
    definition = STEP_DEFINITION if definition is None else definition
    if step_id not in definition:
        raise KeyError(f"Step '{step_id}' not found in step definition.")
    return definition[step_id]


def validate_definition(step_ids, definition):
    """Guard against a broken catalog before a session is built on it."""
    for step_id in step_ids:
        node = get_step(step_id, definition)
        if node.get("type") not in STEP_TYPES:
            raise ValueError(f"Step '{step_id}' has unknown type {node.get('type')!r}.")
        if node["type"] in ("single_choice", "multi_choice") and not node.get("options"):
            raise ValueError(f"Step '{step_id}' is a choice step without options.")
