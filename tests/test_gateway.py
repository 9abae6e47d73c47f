import datetime as dt

import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage

from fitai.config import Settings
from fitai.gateway import GenerationError, GenerationErrorKind, GenerationGateway, parse_structured
from fitai.models import GeneratedFood, UserProfile, WorkoutExercise
from fitai.planner import WORKOUT_PLAN_SYSTEM_PROMPT, PlanComposer
from fitai.recommendations import RECOMMENDATIONS_SYSTEM_PROMPT, RecommendationEngine
from fitai.seeding import FOOD_SYSTEM_PROMPT, CatalogSeeder
from fitai.store import CatalogStore


class RecordingLLM:
    def __init__(self, content="ok"):
        self.content = content
        self.calls = []

    def invoke(self, messages, **kwargs):
        self.calls.append((messages, kwargs))
        return AIMessage(content=self.content)


class TimeoutLLM:
    def invoke(self, messages, **kwargs):
        raise TimeoutError("read timed out")


def test_unconfigured_gateway_fails_before_any_call():
    gateway = GenerationGateway(Settings(openai_api_key=""))
    assert not gateway.is_configured
    with pytest.raises(GenerationError) as exc:
        gateway.complete("hello")
    assert exc.value.kind is GenerationErrorKind.UNCONFIGURED
    assert gateway._llm is None


def test_returns_content_verbatim():
    gateway = GenerationGateway(Settings(), llm=FakeListChatModel(responses=["  {\"a\": 1}  "]))
    assert gateway.complete("hello") == "  {\"a\": 1}  "


def test_empty_content_returns_empty_string():
    gateway = GenerationGateway(Settings(), llm=RecordingLLM(content=""))
    assert gateway.complete("hello") == ""


def test_system_prompt_and_overrides_are_sent():
    llm = RecordingLLM()
    gateway = GenerationGateway(Settings(), llm=llm)
    gateway.complete("user text", system_prompt="system text", max_tokens=150, temperature=0.2)
    messages, kwargs = llm.calls[0]
    assert [m.type for m in messages] == ["system", "human"]
    assert messages[0].content == "system text"
    assert messages[1].content == "user text"
    assert kwargs == {"max_tokens": 150, "temperature": 0.2}


def test_system_prompt_is_keyword_only():
    gateway = GenerationGateway(Settings(), llm=RecordingLLM())
    with pytest.raises(TypeError):
        gateway.complete("user text", "system text")


def test_callers_send_their_system_prompt_as_system_message():
    llm = RecordingLLM(content="{}")
    gateway = GenerationGateway(Settings(), llm=llm)
    PlanComposer(gateway).compose_workout_plan(UserProfile(age=30), dt.date(2024, 5, 6))
    RecommendationEngine(gateway).recommend(UserProfile(goal="maintain"))
    CatalogSeeder(gateway, CatalogStore()).generate_food()
    system_prompts = [messages[0].content for messages, _ in llm.calls]
    assert system_prompts == [WORKOUT_PLAN_SYSTEM_PROMPT, RECOMMENDATIONS_SYSTEM_PROMPT, FOOD_SYSTEM_PROMPT]
    assert all(messages[1].type == "human" for messages, _ in llm.calls)
    assert llm.calls[2][1] == {"max_tokens": 200, "temperature": 0.7}


def test_one_request_per_call():
    llm = RecordingLLM()
    gateway = GenerationGateway(Settings(), llm=llm)
    gateway.complete("only user text")
    assert len(llm.calls) == 1
    assert [m.type for m in llm.calls[0][0]] == ["human"]
    assert llm.calls[0][1] == {}


def test_transport_failure_wraps_cause():
    gateway = GenerationGateway(Settings(), llm=TimeoutLLM())
    with pytest.raises(GenerationError) as exc:
        gateway.complete("hello")
    assert exc.value.kind is GenerationErrorKind.TRANSPORT_FAILURE
    assert isinstance(exc.value.cause, TimeoutError)


def test_default_client_is_bounded_and_does_not_retry():
    settings = Settings(openai_api_key="sk-test", openai_model="gpt-4o-mini", timeout_seconds=12)
    gateway = GenerationGateway(settings)
    assert gateway.is_configured
    llm = gateway._get_llm()
    assert llm.max_retries == 0
    assert llm.request_timeout == 12
    assert llm.model_name == "gpt-4o-mini"
    assert gateway._get_llm() is llm


def test_parse_structured_strips_fences_and_prose():
    text = "Here you go:\n```json\n{\"name\": \"Lentils\", \"calories_per_100g\": 116, \"protein_g\": 9, \"carbs_g\": 20, \"fat_g\": 0.4}\n```\nEnjoy!"
    food = parse_structured(text, GeneratedFood)
    assert food.name == "Lentils"
    assert food.fiber_g == 0


@pytest.mark.parametrize("text", ["", "not json at all", "[1, 2, 3]", "{\"name\": \"Lentils\"}"])
def test_parse_structured_failures(text):
    with pytest.raises(GenerationError) as exc:
        parse_structured(text, GeneratedFood)
    assert exc.value.kind is GenerationErrorKind.PARSE_FAILURE


def test_parse_structured_enforces_model_invariants():
    with pytest.raises(GenerationError) as exc:
        parse_structured("{\"name\": \"Nothing\", \"sets\": 3, \"reps\": 0, \"duration\": 0}", WorkoutExercise)
    assert exc.value.kind is GenerationErrorKind.PARSE_FAILURE
