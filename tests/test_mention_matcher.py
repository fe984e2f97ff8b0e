import pytest

from mentionhook.dispatch.matcher import MentionMatcher


@pytest.fixture
def matcher() -> MentionMatcher:
    return MentionMatcher(["ai_deepseek", "ai_qwen"])


def test_matches_mention_followed_by_text(matcher: MentionMatcher) -> None:
    mention = matcher.match("hey @ai_deepseek please help")
    assert mention is not None
    assert mention.bot_id == "ai_deepseek"


def test_matches_mention_at_end_of_text(matcher: MentionMatcher) -> None:
    mention = matcher.match("ping @ai_qwen")
    assert mention is not None
    assert mention.bot_id == "ai_qwen"


def test_matches_mention_followed_by_punctuation(matcher: MentionMatcher) -> None:
    mention = matcher.match("@ai_qwen: what about this?")
    assert mention is not None
    assert mention.bot_id == "ai_qwen"


def test_ignores_email_addresses(matcher: MentionMatcher) -> None:
    assert matcher.match("mail user@example.com about it") is None


def test_ignores_longer_names_sharing_a_prefix(matcher: MentionMatcher) -> None:
    assert matcher.match("@ai_qwen2 are you there") is None
    assert matcher.match("@ai_qwen.example.com") is None
    assert matcher.match("@ai_qwen-bot hello") is None


def test_is_case_insensitive_and_returns_configured_name(matcher: MentionMatcher) -> None:
    mention = matcher.match("hello @AI_DeepSeek")
    assert mention is not None
    assert mention.raw_match == "AI_DeepSeek"
    assert mention.bot_id == "ai_deepseek"


def test_returns_first_mention_only(matcher: MentionMatcher) -> None:
    mention = matcher.match("@ai_qwen and @ai_deepseek both")
    assert mention is not None
    assert mention.bot_id == "ai_qwen"


@pytest.mark.parametrize("text", [None, "", "no mention here", "@someone_else hi"])
def test_no_mention(matcher: MentionMatcher, text) -> None:
    assert matcher.match(text) is None


def test_bot_names_are_injected() -> None:
    matcher = MentionMatcher(["bot", "@assistant", " ", "bot"])
    assert matcher.bot_names == ["bot", "assistant"]
    assert matcher.match("thanks @assistant!").bot_id == "assistant"
    assert matcher.match("@ai_qwen hi") is None


def test_no_configured_names_never_matches() -> None:
    assert MentionMatcher([]).match("@ai_qwen hi") is None
