import pytest

from studio_gateway.errors import ValidationError
from studio_gateway.store import InMemoryRateLimitStore, RateLimitEntry
from studio_gateway.utils import (
    client_identifier,
    optional_text,
    rate_limit_key,
    require_choice,
    require_image_base64,
    require_images,
    require_messages,
    require_prompt,
)


def test_client_identifier_uses_first_forwarded_hop():
    assert client_identifier({"x-forwarded-for": "1.2.3.4, 10.0.0.1"}) == "1.2.3.4"
    assert client_identifier({"x-forwarded-for": " 5.6.7.8 "}) == "5.6.7.8"


def test_client_identifier_falls_back_to_unknown():
    assert client_identifier({}) == "unknown"
    assert client_identifier({"x-forwarded-for": ""}) == "unknown"


def test_rate_limit_key_namespaces_by_endpoint():
    assert rate_limit_key("chat", "1.1.1.1") == "chat:1.1.1.1"


def test_require_prompt_messages():
    with pytest.raises(ValidationError, match="Prompt is required"):
        require_prompt(None)
    with pytest.raises(ValidationError, match="Invalid prompt format"):
        require_prompt(42)
    with pytest.raises(ValidationError, match="maximum length of 10 characters"):
        require_prompt("x" * 11, max_length=10)
    assert require_prompt("a cat in space") == "a cat in space"


def test_require_image_base64_checks_size_and_alphabet():
    assert require_image_base64("aGVsbG8=") == "aGVsbG8="
    with pytest.raises(ValidationError, match="Invalid image format"):
        require_image_base64("data:image/png;base64,aGVsbG8=")
    with pytest.raises(ValidationError, match="Invalid image format"):
        require_image_base64("aGVsbG8=\n")
    with pytest.raises(ValidationError, match="Image size exceeds 1MB limit"):
        require_image_base64("A" * (2 * 1024 * 1024), max_bytes=1024 * 1024)
    with pytest.raises(ValidationError, match="Invalid input format"):
        require_image_base64(["aGVsbG8="])


def test_require_choice_accepts_none_and_members():
    assert require_choice(None, ("a", "b"), "bad") is None
    assert require_choice("a", ("a", "b"), "bad") == "a"
    with pytest.raises(ValidationError, match="bad"):
        require_choice("c", ("a", "b"), "bad")
    with pytest.raises(ValidationError, match="bad"):
        require_choice(["a"], ("a", "b"), "bad")


def test_require_messages_shape():
    with pytest.raises(ValidationError, match="Messages array is required"):
        require_messages("hello")
    with pytest.raises(ValidationError, match="Invalid message format"):
        require_messages([{"content": "hi"}])
    messages = [{"role": "user", "content": "hi"}]
    assert require_messages(messages) is messages


def test_require_images_bounds():
    with pytest.raises(ValidationError, match="At least one image is required"):
        require_images([])
    with pytest.raises(ValidationError, match="Maximum 4 images"):
        require_images(["u"] * 5)
    with pytest.raises(ValidationError, match="Invalid image format"):
        require_images(["u", 3])


def test_optional_text():
    assert optional_text(None) is None
    assert optional_text("") is None
    assert optional_text("fa") == "fa"
    with pytest.raises(ValidationError):
        optional_text(1)


def test_store_caps_keys_in_lru_order():
    store = InMemoryRateLimitStore(max_keys=2)
    store.set("a", RateLimitEntry(key="a", window_start=0))
    store.set("b", RateLimitEntry(key="b", window_start=0))
    store.get("a")
    store.set("c", RateLimitEntry(key="c", window_start=0))

    assert len(store) == 2
    assert store.get("b") is None
    assert store.get("a") is not None


def test_store_without_cap_keeps_everything():
    store = InMemoryRateLimitStore(max_keys=0)
    for i in range(50):
        store.set(str(i), RateLimitEntry(key=str(i), window_start=0))

    assert len(store) == 50
