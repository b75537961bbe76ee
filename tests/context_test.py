from journey_chat.services.context import assemble, content_text, greeting_turn

HISTORY = [
    {"id": "1", "role": "user", "content": "hi", "ordinal": 1},
    {"id": "2", "role": "assistant", "content": "hello", "ordinal": 2},
]


def test_system_prompt_leads_even_without_history():
    assert assemble("be kind", []) == [{"role": "system", "content": "be kind"}]


def test_history_is_appended_as_stored():
    messages = assemble("be kind", HISTORY)

    assert messages == [
        {"role": "system", "content": "be kind"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
    ]


def test_trailing_turn_is_a_user_message():
    messages = assemble("be kind", HISTORY, "I am back")

    assert messages[0]["role"] == "system"
    assert messages[-1] == {"role": "user", "content": "I am back"}
    assert len(messages) == 4


def test_assemble_leaves_inputs_untouched():
    history = [dict(m) for m in HISTORY]
    assemble("be kind", history, "again")
    assert history == HISTORY


def test_greeting_uses_name_or_fallback():
    template = "My name is {name}"
    assert greeting_turn(template, "Sam", "there") == "My name is Sam"
    assert greeting_turn(template, None, "there") == "My name is there"
    assert greeting_turn(template, "", "there") == "My name is there"


def test_content_text_flattens_payloads():
    assert content_text("plain") == "plain"
    assert content_text({"text": "wrapped"}) == "wrapped"
    assert content_text({"kind": "card"}) == '{"kind": "card"}'
    assert content_text(None) == ""
