from app.domain.services import (
    generate_session_token,
    looks_like_session_token,
    session_token_digest,
)


def test_generated_tokens_are_unique_and_well_formed():
    tokens = {generate_session_token() for _ in range(50)}
    assert len(tokens) == 50
    assert all(len(t) == 43 and looks_like_session_token(t) for t in tokens)


def test_malformed_tokens_are_rejected():
    assert not looks_like_session_token(None)
    assert not looks_like_session_token("")
    assert not looks_like_session_token("short")
    assert not looks_like_session_token("a" * 42 + "!")
    assert not looks_like_session_token("a" * 44)


def test_digest_is_stable_and_hides_the_token():
    t = generate_session_token()
    assert session_token_digest(t) == session_token_digest(t)
    assert t not in session_token_digest(t)
    assert len(session_token_digest(t)) == 64
