from __future__ import annotations

import pytest
from conftest import APP_ID, USER_ID
from fixtures_skills import facts

import skillcheck
from skillcheck.conformance import QUESTION_MARK_CHECK
from skillcheck.context import StepContext
from skillcheck.errors import (
    ConfigurationError,
    ExpectationViolation,
    MissingArgumentError,
    NotInitializedError,
    UnknownFeatureError,
)
from skillcheck.harness import Harness
from skillcheck.hookspecs import hookimpl
from skillcheck.types import Failure, ResponseFacets


def test_test_requires_initialization(harness: Harness) -> None:
    with pytest.raises(NotInitializedError, match="must call 'initialize'"):
        harness.test([])


def test_test_requires_a_sequence(harness: Harness) -> None:
    harness.initialize(facts, APP_ID, USER_ID)

    with pytest.raises(MissingArgumentError):
        harness.test(None)


def test_initialize_accepts_module_or_bare_callable(harness: Harness) -> None:
    harness.initialize(facts.handler, APP_ID, USER_ID)
    assert harness.initialized

    with pytest.raises(ConfigurationError):
        harness.initialize(object(), APP_ID, USER_ID)
    with pytest.raises(MissingArgumentError):
        harness.initialize(None, APP_ID, USER_ID)


def test_requests_carry_initialized_identity(harness: Harness) -> None:
    harness.initialize(facts, APP_ID, USER_ID)

    event = harness.launch_request().to_event()

    assert event["session"]["application"]["applicationId"] == APP_ID
    assert event["session"]["user"]["userId"] == USER_ID


def test_set_locale_changes_only_later_requests(harness: Harness) -> None:
    before = harness.launch_request()

    harness.set_locale("de-DE")
    after = harness.intent_request("HelpIntent")

    assert before.locale == "en-US"
    assert after.locale == "de-DE"
    assert harness.session_ended_request(locale="fr-FR").locale == "fr-FR"


def test_set_locale_rejects_empty(harness: Harness) -> None:
    with pytest.raises(MissingArgumentError):
        harness.set_locale("")


def test_set_locale_switches_translation(harness: Harness) -> None:
    harness.initialize_i18n({"en-US": {"translation": {"HI": "Hi"}}, "de-DE": {"translation": {"HI": "Hallo"}}})

    assert harness.t("HI") == "Hi"
    harness.set_locale("de-DE")
    assert harness.t("HI") == "Hallo"


def test_t_requires_i18n(harness: Harness) -> None:
    with pytest.raises(NotInitializedError, match="initialize_i18n"):
        harness.t("HI")


def test_set_extra_feature_rejects_unknown_keys(harness: Harness) -> None:
    with pytest.raises(UnknownFeatureError):
        harness.set_extra_feature("colorCheck", True)


def test_declared_test_replays_the_facts_skill(harness: Harness) -> None:
    harness.initialize(facts, APP_ID, USER_ID)

    declared = harness.test(
        [
            {
                "request": harness.launch_request(),
                "says": "Welcome to facts. Do you want a fact?",
                "reprompts": "Do you want a fact?",
                "shouldEndSession": False,
            },
            {"request": harness.intent_request("FactIntent", {"Topic": "space"}), "says": "Fact 1 about space. Want another?"},
            {"request": harness.intent_request("FactIntent"), "says": "Fact 2 about anything. Want another?"},
            {"request": harness.intent_request("Stop"), "saysNothing": True, "repromptsNothing": True, "shouldEndSession": True},
            {"request": harness.session_ended_request(), "saysNothing": True},
        ]
    )

    assert declared.__name__ == "test_returns_the_correct_responses"
    assert declared() is None


def test_declared_test_reports_violations(harness: Harness) -> None:
    harness.initialize(facts, APP_ID, USER_ID)
    declared = harness.test([{"request": harness.launch_request(), "says": "Hello"}], name="greets by name")

    assert declared.__name__ == "test_greets_by_name"
    with pytest.raises(ExpectationViolation, match=r"^Request #1 \(LaunchRequest\)"):
        declared()


def test_declared_test_uses_translations_in_callbacks(harness: Harness) -> None:
    harness.initialize(facts, APP_ID, USER_ID)
    harness.initialize_i18n({"en-US": {"translation": {"WELCOME": "Welcome to facts. Do you want a fact?"}}})

    def says_welcome(context: StepContext, speech: str | None) -> None:
        expected = f"<speak> {context.t('WELCOME')} </speak>"
        if speech != expected:
            context.fail(message="wrong welcome", expected=expected, actual=speech, show_diff=True)

    harness.test([{"request": harness.launch_request(), "saysCallback": says_welcome}])()


def test_feature_toggles_are_read_when_the_test_runs(harness: Harness) -> None:
    harness.initialize(lambda event, context: {"response": {"outputSpeech": {"ssml": "Bye?"}, "shouldEndSession": True}}, APP_ID, USER_ID)
    declared = harness.test([{"request": harness.launch_request()}])

    with pytest.raises(ExpectationViolation, match="contains a question mark"):
        declared()

    harness.set_extra_feature(QUESTION_MARK_CHECK, False)
    declared()

    harness.set_extra_feature(QUESTION_MARK_CHECK, True)
    with pytest.raises(ExpectationViolation, match="contains a question mark"):
        declared()


def test_translations_loaded_after_declaration_reach_callbacks(harness: Harness) -> None:
    harness.initialize(facts, APP_ID, USER_ID)
    seen: list[str] = []

    def says_callback(context: StepContext, speech: str | None) -> None:
        seen.append(context.t("WELCOME"))

    declared = harness.test([{"request": harness.launch_request(), "saysCallback": says_callback}])
    harness.initialize_i18n({"en-US": {"translation": {"WELCOME": "Welcome to facts."}}})

    declared()

    assert seen == ["Welcome to facts."]


def test_register_check_adds_a_toggleable_feature(harness: Harness) -> None:
    class NoShouting:
        @hookimpl
        def check_response(self, facets: ResponseFacets) -> Failure | None:
            if facets.speech and facets.speech.isupper():
                return Failure(message="the response shouts")
            return None

    harness.initialize(lambda event, context: {"response": {"outputSpeech": {"ssml": "HELLO?"}}}, APP_ID, USER_ID)
    harness.register_check("noShouting", NoShouting())

    with pytest.raises(ExpectationViolation, match="the response shouts"):
        harness.test([{"request": harness.launch_request()}])()

    harness.set_extra_feature("noShouting", False)
    harness.test([{"request": harness.launch_request()}])()


def test_module_level_helpers_use_the_default_harness(monkeypatch: pytest.MonkeyPatch, harness: Harness) -> None:
    monkeypatch.setattr(skillcheck, "_DEFAULT", harness)

    skillcheck.initialize(facts, APP_ID, USER_ID)
    skillcheck.set_locale("en-GB")
    skillcheck.set_extra_feature(QUESTION_MARK_CHECK, True)

    assert skillcheck.default_harness() is harness
    assert skillcheck.launch_request().locale == "en-GB"
    declared = skillcheck.test(
        [
            {"request": skillcheck.launch_request(), "says": "Welcome to facts. Do you want a fact?"},
            {"request": skillcheck.intent_request("Stop"), "shouldEndSession": True},
            {"request": skillcheck.session_ended_request("EXCEEDED_MAX_REPROMPTS")},
        ]
    )
    declared()
