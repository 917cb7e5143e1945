"""
Tests for AuthService and the credential store it composes.
"""

import uuid

import pytest
from unittest.mock import AsyncMock, MagicMock

from auth.errors import INCORRECT_CREDENTIALS, INVALID_TOKEN, NOT_LOGGED_IN, Conflict, Unauthorized
from auth.jwt import create_token, verify_token
from auth.service import AuthService
from database.users import DuplicateUserError, UserStore


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup_stores_hash_and_issues_token(self, db):
        service = AuthService(UserStore(db))
        result = await service.signup("alice", "a@x.com", "pw1")

        assert result.user.username == "alice"
        assert result.user.password_hash != "pw1"
        assert verify_token(result.token) == str(result.user.user_id)

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, db):
        service = AuthService(UserStore(db))
        await service.signup("alice", "a@x.com", "pw1")
        with pytest.raises(Conflict):
            await service.signup("alice2", "a@x.com", "pw2")

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, db):
        service = AuthService(UserStore(db))
        await service.signup("alice", "a@x.com", "pw1")
        with pytest.raises(Conflict):
            await service.signup("alice", "other@x.com", "pw2")

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, db):
        service = AuthService(UserStore(db))
        await service.signup("alice", "A@X.com", "pw1")
        with pytest.raises(Conflict):
            await service.signup("bob", "a@x.com", "pw2")

    @pytest.mark.asyncio
    async def test_insert_race_maps_to_conflict(self):
        store = MagicMock()
        store.find_by_identity = AsyncMock(return_value=None)
        store.create = AsyncMock(side_effect=DuplicateUserError("alice"))

        with pytest.raises(Conflict):
            await AuthService(store).signup("alice", "a@x.com", "pw1")


class TestUserStore:
    @pytest.mark.asyncio
    async def test_unique_constraint_without_precheck(self, db):
        store = UserStore(db)
        await store.create(username="alice", email="a@x.com", password_hash="h")
        with pytest.raises(DuplicateUserError):
            await store.create(username="other", email="a@x.com", password_hash="h")
        # session is usable again after the rollback
        assert await store.find_by_email("a@x.com") is not None

    @pytest.mark.asyncio
    async def test_find_by_identity_matches_either_field(self, db):
        store = UserStore(db)
        await store.create(username="alice", email="a@x.com", password_hash="h")
        assert await store.find_by_identity("alice", "nobody@x.com") is not None
        assert await store.find_by_identity("nobody", "a@x.com") is not None
        assert await store.find_by_identity("nobody", "nobody@x.com") is None


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_with_correct_password(self, db):
        service = AuthService(UserStore(db))
        created = await service.signup("alice", "a@x.com", "pw1")

        result = await service.login("a@x.com", "pw1")
        assert result.user.user_id == created.user.user_id
        assert verify_token(result.token) == str(created.user.user_id)

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_identical(self, db):
        service = AuthService(UserStore(db))
        await service.signup("alice", "a@x.com", "pw1")

        with pytest.raises(Unauthorized) as wrong_pw:
            await service.login("a@x.com", "nope")
        with pytest.raises(Unauthorized) as unknown:
            await service.login("ghost@x.com", "pw1")

        assert wrong_pw.value.message == unknown.value.message == INCORRECT_CREDENTIALS


class TestIdentify:
    @pytest.mark.asyncio
    async def test_identify_valid_token(self, db):
        service = AuthService(UserStore(db))
        created = await service.signup("alice", "a@x.com", "pw1")

        user = await service.identify(created.token)
        assert user.username == "alice"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token(self, db, token):
        with pytest.raises(Unauthorized) as exc:
            await AuthService(UserStore(db)).identify(token)
        assert exc.value.message == NOT_LOGGED_IN

    @pytest.mark.asyncio
    async def test_garbage_and_unknown_subject_are_invalid(self, db):
        service = AuthService(UserStore(db))
        for token in ("garbage", create_token("not-a-uuid"), create_token(str(uuid.uuid4()))):
            with pytest.raises(Unauthorized) as exc:
                await service.identify(token)
            assert exc.value.message == INVALID_TOKEN


class TestLoginOffloadsHashing:
    @pytest.mark.asyncio
    async def test_unknown_email_check_runs_in_worker_thread(self, monkeypatch):
        import auth.service as service_module

        store = MagicMock()
        store.find_by_email = AsyncMock(return_value=None)
        offloaded = []

        async def fake_to_thread(func, *args):
            offloaded.append((func, args))
            return func(*args)

        monkeypatch.setattr(service_module.asyncio, "to_thread", fake_to_thread)
        with pytest.raises(Unauthorized):
            await AuthService(store).login("ghost@x.com", "pw1")

        assert offloaded == [(service_module.check_password, ("pw1", None))]
