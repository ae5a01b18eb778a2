"""Tests for answer values and the AnswerStore."""

import pytest

from carnival_quiz.engine import (
    AnswerStore,
    FreeText,
    MultiChoice,
    SingleChoice,
    answers_to_payload,
)


def test_unanswered_step_is_absent():
    store = AnswerStore()

    assert store.get("gender") is None
    assert "gender" not in store
    assert dict(store.snapshot()) == {}


def test_set_replaces_value():
    store = AnswerStore()
    store.set("gender", SingleChoice("HOMEM"))
    store.set("gender", SingleChoice("MULHER"))

    assert store.get("gender") == SingleChoice("MULHER")


def test_toggle_adds_then_removes():
    store = AnswerStore()

    store.toggle("focus_areas", "Costas")
    assert store.get("focus_areas") == MultiChoice(("Costas",))

    store.toggle("focus_areas", "Costas")
    assert store.get("focus_areas") == MultiChoice(())
    # the step was touched, so the key stays even though the set is empty
    assert "focus_areas" in store


@pytest.mark.parametrize("token", ["Glúteos", "Braços", "Peitoral"])
def test_toggle_twice_is_involution(token):
    store = AnswerStore()
    store.toggle("focus_areas", "Costas")
    before = store.get("focus_areas")

    store.toggle("focus_areas", token)
    store.toggle("focus_areas", token)

    assert set(store.get("focus_areas").tokens) == set(before.tokens)


def test_toggle_never_mutates_previous_value():
    store = AnswerStore()
    store.toggle("focus_areas", "Costas")
    first = store.get("focus_areas")

    store.toggle("focus_areas", "Braços")

    assert first.tokens == ("Costas",)
    assert store.get("focus_areas") is not first
    assert "Braços" in store.get("focus_areas")


def test_toggle_replaces_non_multi_value():
    store = AnswerStore()
    store.set("focus_areas", FreeText("stray"))

    store.toggle("focus_areas", "Costas")

    assert store.get("focus_areas") == MultiChoice(("Costas",))


def test_snapshot_is_read_only_and_detached():
    store = AnswerStore()
    store.set("age", SingleChoice("30 - 39 anos"))
    snap = store.snapshot()

    with pytest.raises(TypeError):
        snap["age"] = SingleChoice("50+ anos")

    store.set("goal", SingleChoice("Secar e Definir"))
    assert "goal" not in snap


def test_frozen_store_refuses_mutation():
    store = AnswerStore()
    store.set("age", SingleChoice("30 - 39 anos"))
    store.freeze()

    assert store.set("age", SingleChoice("50+ anos")) is False
    assert store.toggle("focus_areas", "Costas") is False
    assert store.get("age") == SingleChoice("30 - 39 anos")
    assert "focus_areas" not in store


def test_variants_are_tagged():
    assert SingleChoice("x").kind == "single_choice"
    assert MultiChoice(("x",)).kind == "multi_choice"
    assert FreeText("x").kind == "free_text"


def test_answers_to_payload():
    payload = answers_to_payload({
        "gender": SingleChoice("MULHER"),
        "height": FreeText("1,65"),
        "focus_areas": MultiChoice(("Costas", "Glúteos")),
    })

    assert payload == {
        "gender": "MULHER",
        "height": "1,65",
        "focus_areas": ["Costas", "Glúteos"],
    }


def test_multi_choice_payload_is_a_list():
    payload = MultiChoice(("Costas",)).to_payload()

    assert isinstance(payload, list)
    assert payload == ["Costas"]
