import pytest
from jose import jwt

from ninja_missions.errors import InvalidToken, Unauthenticated, ValidationFailed
from ninja_missions.identity import ALGORITHM, IdentityService, hash_password, verify_password
from ninja_missions.ranks import NinjaRank

SECRET = "test-secret"


@pytest.fixture
def identity(sql_store):
    return IdentityService(sql_store, SECRET)


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("ramen123")
        assert hashed != "ramen123"
        assert verify_password("ramen123", hashed)
        assert not verify_password("ramen124", hashed)

    def test_garbage_hash_does_not_verify(self):
        assert not verify_password("ramen123", "not-a-hash")


class TestRegisterLogin:
    def test_register_issues_token_for_new_ninja(self, identity):
        token, ninja = identity.register("sasuke", "uchihapower", "Genin")

        assert ninja.rank == NinjaRank.GENIN
        assert ninja.experience_points == 0
        assert ninja.avatar_url.endswith("seed=sasuke")
        caller = identity.resolve_caller(token)
        assert (caller.id, caller.username, caller.rank) == (ninja.id, "sasuke", NinjaRank.GENIN)

    @pytest.mark.parametrize("rank", [None, "Hokage", ""])
    def test_unknown_rank_defaults_to_academy(self, identity, rank):
        _, ninja = identity.register("konohamaru", "sexy-jutsu", rank)
        assert ninja.rank == NinjaRank.ACADEMY

    def test_register_requires_both_fields(self, identity):
        with pytest.raises(ValidationFailed):
            identity.register("", "pw")
        with pytest.raises(ValidationFailed):
            identity.register("naruto", None)

    def test_duplicate_username(self, identity):
        identity.register("naruto", "ramen123")
        with pytest.raises(ValidationFailed):
            identity.register("naruto", "other")

    def test_duplicate_username_lost_race(self, identity, monkeypatch):
        identity.register("naruto", "ramen123")
        # a concurrent registration passed the lookup before ours committed
        monkeypatch.setattr(identity.store, "find_credentials", lambda username: None)

        with pytest.raises(ValidationFailed) as exc:
            identity.register("naruto", "other")
        assert exc.value.message == "Username already taken"

    def test_login(self, identity):
        _, registered = identity.register("naruto", "ramen123", "Genin")
        token, ninja = identity.login("naruto", "ramen123")
        assert ninja.id == registered.id
        assert identity.resolve_caller(token).id == registered.id

    def test_login_rejects_bad_credentials(self, identity):
        identity.register("naruto", "ramen123")
        with pytest.raises(Unauthenticated):
            identity.login("naruto", "miso")
        with pytest.raises(Unauthenticated):
            identity.login("sasuke", "ramen123")
        with pytest.raises(ValidationFailed):
            identity.login("naruto", "")


class TestResolveCaller:
    def test_missing_token(self, identity):
        with pytest.raises(Unauthenticated):
            identity.resolve_caller(None)

    def test_wrong_signature(self, identity):
        _, ninja = identity.register("naruto", "ramen123")
        forged = IdentityService(identity.store, "other-secret").issue_token(ninja)
        with pytest.raises(InvalidToken):
            identity.resolve_caller(forged)

    def test_expired(self, sql_store):
        expired = IdentityService(sql_store, SECRET, expire_hours=-1)
        _, ninja = expired.register("naruto", "ramen123")
        with pytest.raises(InvalidToken):
            expired.resolve_caller(expired.issue_token(ninja))

    def test_malformed_claims(self, identity):
        token = jwt.encode({"sub": "abc", "username": "x", "rank": "Genin"}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(InvalidToken):
            identity.resolve_caller(token)
        token = jwt.encode({"sub": "1", "username": "x", "rank": "Hokage"}, SECRET, algorithm=ALGORITHM)
        with pytest.raises(InvalidToken):
            identity.resolve_caller(token)

    def test_garbage(self, identity):
        with pytest.raises(InvalidToken):
            identity.resolve_caller("not.a.jwt")
