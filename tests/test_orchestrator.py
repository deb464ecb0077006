import pytest

import threading

from helpers import ScriptedGateway, SlowGateway, text_reply, tool_call, tools_reply
from topicpilot import AssistantConfig, TopicPilotApp, TurnOutcome
from topicpilot.agent.llm import GatewayError, GatewayReply
from topicpilot.agent.prompts import EXHAUSTION_NOTICE


def make_session(script, **config):
    gateway = ScriptedGateway(script)
    session = TopicPilotApp.create(AssistantConfig(**config), gateway=gateway)
    return session, gateway


def roles(session):
    return [m.role for m in session.messages]


# ------------------------------------------------------------------
# Plain answers
# ------------------------------------------------------------------

def test_plain_answer_completes_in_one_round(lamp):
    session, gateway = make_session([text_reply("The lamp is ON.")])

    result = session.send_turn("What is the lamp doing?", lamp)

    assert result.outcome is TurnOutcome.DONE
    assert result.final_text == "The lamp is ON."
    assert result.rounds_used == 1
    assert result.invocations_used == 0
    assert roles(session) == ["system", "user", "assistant"]
    assert len(gateway.calls) == 1


def test_user_message_carries_context(lamp):
    session, gateway = make_session([text_reply("ok")])

    session.send_turn("What is the lamp doing?", lamp)

    user = session.messages[1].content
    assert user.startswith("Context:\nTopic: home/bedroom/lamp\nValue: ON")
    assert user.endswith("\n\nUser Question: What is the lamp doing?")


def test_context_can_be_skipped(lamp):
    session, _ = make_session([text_reply("ok")])

    session.send_turn("hello", lamp, include_context=False)

    assert session.messages[1].content == "hello"


def test_tools_are_offered(lamp):
    session, gateway = make_session([text_reply("ok")])

    session.send_turn("q", lamp)

    assert sorted(gateway.calls[0].tool_names) == [
        "get_topic",
        "list_children",
        "list_parents",
        "query_topic_history",
    ]


# ------------------------------------------------------------------
# Tool rounds
# ------------------------------------------------------------------

def test_tool_round_then_answer(lamp):
    call = tool_call("c1", "query_topic_history", {"topic": "home/bedroom/lamp", "limit": 2})
    session, gateway = make_session([tools_reply(call), text_reply("It toggles.")])

    result = session.send_turn("Is it flapping?", lamp)

    assert result.outcome is TurnOutcome.DONE
    assert result.final_text == "It toggles."
    assert result.rounds_used == 2
    assert result.invocations_used == 1
    assert roles(session) == ["system", "user", "assistant", "tool", "assistant"]

    assistant, tool = session.messages[2], session.messages[3]
    assert assistant.tool_calls == [call]
    assert tool.tool_call_id == "c1"
    assert tool.content == (
        "[2024-01-01T00:02:00+00:00] OFF\n"
        "[2024-01-01T00:03:00+00:00] ON"
    )

    # second request sees the tool result
    assert [m.role for m in gateway.calls[1].messages] == ["system", "user", "assistant", "tool"]


def test_tool_results_follow_call_order(lamp):
    calls = [
        tool_call("first", "get_topic", {"topic": "home/bedroom/lamp"}),
        tool_call("second", "list_parents", {"topic": "home/bedroom/lamp"}),
        tool_call("third", "get_topic", "{broken"),
    ]
    session, _ = make_session([tools_reply(*calls), text_reply("done")])

    result = session.send_turn("q", lamp)

    tool_messages = [m for m in session.messages if m.role == "tool"]
    assert [m.tool_call_id for m in tool_messages] == ["first", "second", "third"]
    assert tool_messages[2].content.startswith("Error: invalid arguments for get_topic:")
    assert result.outcome is TurnOutcome.DONE
    assert result.invocations_used == 3


def test_tools_query_whole_tree_from_focus(lamp):
    call = tool_call("c1", "list_children", {"topic": "home/kitchen"})
    session, _ = make_session([tools_reply(call), text_reply("ok")])

    session.send_turn("q", lamp)

    assert session.messages[3].content.startswith("Child topics (2):\n✓ home/kitchen/fridge")


def test_parallel_tools(lamp):
    calls = [
        tool_call("a", "get_topic", {"topic": "home/bedroom/lamp"}),
        tool_call("b", "get_topic", {"topic": "home/bedroom/sensor"}),
    ]
    session, _ = make_session([tools_reply(*calls), text_reply("ok")], parallel_tools=True)

    session.send_turn("q", lamp)

    tool_messages = [m for m in session.messages if m.role == "tool"]
    assert [m.tool_call_id for m in tool_messages] == ["a", "b"]
    assert "Value: 22.5" in tool_messages[1].content


def test_without_focus_tools_find_nothing():
    call = tool_call("c1", "get_topic", {"topic": "home"})
    session, _ = make_session([tools_reply(call), text_reply("unknown")])

    result = session.send_turn("hi")

    assert session.messages[1].content == "hi"
    assert session.messages[3].content == "Topic not found: home"
    assert result.outcome is TurnOutcome.DONE


# ------------------------------------------------------------------
# Round cap
# ------------------------------------------------------------------

def test_round_cap(lamp):
    call = tool_call("loop", "get_topic", {"topic": "home"})
    session, gateway = make_session([tools_reply(call)], history_limit=50)

    result = session.send_turn("q", lamp)

    assert result.outcome is TurnOutcome.ROUND_LIMIT_REACHED
    assert result.rounds_used == 5
    assert result.invocations_used == 5
    assert result.final_text == EXHAUSTION_NOTICE
    assert len(gateway.calls) == 5

    # calls of the final round are still answered
    assert roles(session).count("tool") == 5
    assert session.messages[-1].role == "assistant"
    assert session.messages[-1].content == EXHAUSTION_NOTICE


def test_round_cap_keeps_partial_text(lamp):
    call = tool_call("loop", "get_topic", {"topic": "home"})
    session, _ = make_session([tools_reply(call, text="Looking at home...")], max_tool_rounds=2)

    result = session.send_turn("q", lamp)

    assert result.outcome is TurnOutcome.ROUND_LIMIT_REACHED
    assert result.rounds_used == 2
    assert result.final_text == "Looking at home..."


# ------------------------------------------------------------------
# Failures
# ------------------------------------------------------------------

def test_gateway_error_rolls_back_turn(lamp):
    session, gateway = make_session([text_reply("first answer"), GatewayError("down")])
    session.send_turn("first", lamp)
    before = [m.to_dict() for m in session.messages]

    with pytest.raises(GatewayError):
        session.send_turn("second", lamp)

    assert [m.to_dict() for m in session.messages] == before


def test_gateway_error_after_tool_round_rolls_back(lamp):
    call = tool_call("c1", "get_topic", {"topic": "home"})
    session, _ = make_session([tools_reply(call), GatewayError("timeout")])

    with pytest.raises(GatewayError):
        session.send_turn("q", lamp)

    assert roles(session) == ["system"]


def test_unexpected_exception_rolls_back_turn(lamp):
    session, _ = make_session([RuntimeError("connection reset")])

    with pytest.raises(RuntimeError):
        session.send_turn("q", lamp)

    assert roles(session) == ["system"]


def test_unexpected_exception_after_tool_round_rolls_back(lamp):
    call = tool_call("c1", "get_topic", {"topic": "home"})
    session, _ = make_session([text_reply("kept"), tools_reply(call), TypeError("bad payload")])
    session.send_turn("first", lamp)

    with pytest.raises(TypeError):
        session.send_turn("second", lamp)

    assert roles(session) == ["system", "user", "assistant"]
    assert session.messages[-1].content == "kept"


def test_failed_turn_is_not_counted(lamp):
    session, _ = make_session([text_reply("ok"), GatewayError("down")])

    session.send_turn("one", lamp)
    with pytest.raises(GatewayError):
        session.send_turn("two", lamp)

    assert session.state.turn_count == 1


def test_empty_reply_is_gateway_error(lamp):
    session, _ = make_session([GatewayReply()])

    with pytest.raises(GatewayError):
        session.send_turn("q", lamp)

    assert roles(session) == ["system"]


# ------------------------------------------------------------------
# History
# ------------------------------------------------------------------

def test_history_is_trimmed_between_turns(lamp):
    call = tool_call("c1", "get_topic", {"topic": "home"})
    session, _ = make_session(
        [text_reply("a"), tools_reply(call), text_reply("b"), text_reply("c")],
        history_limit=3,
    )

    for question in ("one", "two", "three"):
        session.send_turn(question, lamp, include_context=False)

    assert session.messages[0].role == "system"
    assert len(session.messages) <= 4
    assert session.messages[1].role != "tool"
    assert session.messages[-1].content == "c"


def test_clear_history(lamp):
    session, _ = make_session([text_reply("ok")])
    session.send_turn("q", lamp)

    session.clear_history()

    assert roles(session) == ["system"]


# ------------------------------------------------------------------
# Suggestions
# ------------------------------------------------------------------

def test_suggest_questions(lamp):
    session, gateway = make_session(
        [text_reply('Sure: ["Is it on?", "When did it change?", 3, "Why?", "A?", "B?", "C?"]')]
    )

    questions = session.suggest_questions(lamp)

    assert questions == ["Is it on?", "When did it change?", "Why?", "A?", "B?"]
    assert gateway.calls[0].tools is None
    assert roles(session) == ["system"]


def test_suggest_questions_failures_are_empty(lamp):
    session, _ = make_session([GatewayError("down")])
    assert session.suggest_questions(lamp) == []

    session, _ = make_session([text_reply("no list here")])
    assert session.suggest_questions(lamp) == []

    session, _ = make_session([text_reply("[not json]")])
    assert session.suggest_questions(lamp) == []


# ------------------------------------------------------------------
# Concurrency
# ------------------------------------------------------------------

def test_concurrent_turns_on_one_session_do_not_interleave(lamp):
    call = tool_call("c1", "get_topic", {"topic": "home"})
    gateway = SlowGateway([tools_reply(call), text_reply("a"), tools_reply(call), text_reply("b")])
    session = TopicPilotApp.create(AssistantConfig(), gateway=gateway)

    start = threading.Barrier(2)
    errors = []

    def ask(question):
        start.wait()
        try:
            session.send_turn(question, lamp, include_context=False)
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=ask, args=(q,)) for q in ("x", "y")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []
    assert roles(session) == [
        "system",
        "user", "assistant", "tool", "assistant",
        "user", "assistant", "tool", "assistant",
    ]
    assert sorted(m.content for m in session.messages if m.role == "user") == ["x", "y"]
    assert session.state.turn_count == 2
