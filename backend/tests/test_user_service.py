"""
Unit tests for UserService.

The repository and the skill service are replaced by AsyncMock
instances, so only the shaping logic is under test.
Tests follow AAA (Arrange, Act, Assert) pattern.
"""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from skillz.core.exceptions import ConflictError, NotFoundError, ValidationError
from skillz.core.security import verify_password
from skillz.repositories.user import UserRepository
from skillz.schemas.skill import DomainSkills, UserSkillView
from skillz.schemas.user import UserProfile
from skillz.services.skill_service import SkillService
from skillz.services.user_service import UserService


TODAY = date(2016, 6, 1)
EMPTY_GRAVATAR = "//www.gravatar.com/avatar/d41d8cd98f00b204e9800998ecf8427e"


@pytest.fixture
def user_repository():
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def skill_service():
    service = AsyncMock(spec=SkillService)
    service.find_user_skills_by_id.return_value = []
    return service


@pytest.fixture
def service(user_repository, skill_service):
    return UserService(user_repository, skill_service, today=lambda: TODAY)


def _julien(**extra):
    return {
        "id": 1,
        "name": "Julien",
        "readable_id": "julien",
        "manager_id": None,
        "phone": None,
        "address": None,
        "experienceCounter": 6,
        "gravatarUrl": EMPTY_GRAVATAR,
        **extra,
    }


class TestManagement:

    @pytest.mark.anyio
    async def test_users_grouped_by_manager_ordered_by_manager_name(self, service, user_repository):
        """
        Test management groups.

        Arrange: Three users, one without manager
        Act: get_management
        Assert: Groups sorted by manager name, unmanaged group last
        """
        # Arrange
        user_repository.get_management.return_value = [
            {"user_id": 1, "user_name": "Christophe Heubès", "manager_id": None, "manager_name": None},
            {"user_id": 2, "user_name": "Alban Smadja", "manager_id": 1, "manager_name": "Christophe Heubès"},
            {"user_id": 3, "user_name": "Benjamin Lacroix", "manager_id": 2, "manager_name": "Alban Smadja"},
        ]

        # Act
        management = await service.get_management()

        # Assert
        assert [group.model_dump() for group in management] == [
            {
                "manager": {"id": 2, "name": "Alban Smadja"},
                "users": [{"id": 3, "name": "Benjamin Lacroix"}],
            },
            {
                "manager": {"id": 1, "name": "Christophe Heubès"},
                "users": [{"id": 2, "name": "Alban Smadja"}],
            },
            {
                "manager": {"id": None, "name": None},
                "users": [{"id": 1, "name": "Christophe Heubès"}],
            },
        ]

    @pytest.mark.anyio
    async def test_users_keep_row_order_inside_a_group(self, service, user_repository):
        user_repository.get_management.return_value = [
            {"user_id": 5, "user_name": "Zoé", "manager_id": 1, "manager_name": "Alban"},
            {"user_id": 4, "user_name": "Anne", "manager_id": 1, "manager_name": "Alban"},
        ]

        management = await service.get_management()

        assert len(management) == 1
        assert [user.id for user in management[0].users] == [5, 4]

    @pytest.mark.anyio
    async def test_manager_names_sort_case_insensitively(self, service, user_repository):
        user_repository.get_management.return_value = [
            {"user_id": 3, "user_name": "Zoé", "manager_id": 1, "manager_name": "Zack"},
            {"user_id": 4, "user_name": "Anne", "manager_id": 2, "manager_name": "benoît"},
            {"user_id": 5, "user_name": "Paul", "manager_id": 6, "manager_name": "Alban"},
        ]

        management = await service.get_management()

        assert [group.manager.name for group in management] == ["Alban", "benoît", "Zack"]

    @pytest.mark.anyio
    async def test_empty_directory(self, service, user_repository):

        user_repository.get_management.return_value = []

        assert await service.get_management() == []


class TestAttachManager:

    @pytest.mark.anyio
    async def test_does_not_attach_manager_when_none(self, service, user_repository):
        user = UserProfile(id=1, name="Julien", readable_id="julien", gravatar_url=EMPTY_GRAVATAR)

        result = await service.attach_manager(user)

        assert result == user
        assert result.manager is None
        user_repository.find_user_by_id.assert_not_awaited()

    @pytest.mark.anyio
    async def test_attaches_manager(self, service, user_repository):
        # Arrange
        user_repository.find_user_by_id.return_value = {"id": 12, "name": "Christophe Heubès"}
        user = UserProfile(
            id=1, name="Julien", readable_id="julien", manager_id=12, gravatar_url=EMPTY_GRAVATAR
        )

        # Act
        result = await service.attach_manager(user)

        # Assert
        user_repository.find_user_by_id.assert_awaited_once_with(12)
        assert result.manager_id == 12
        assert result.manager.id == 12
        assert result.manager.name == "Christophe Heubès"
        assert result.manager.readable_id == "christophe-heubès"

    @pytest.mark.anyio
    async def test_dangling_manager_id(self, service, user_repository):
        user_repository.find_user_by_id.return_value = None
        user = UserProfile(
            id=1, name="Julien", readable_id="julien", manager_id=99, gravatar_url=EMPTY_GRAVATAR
        )

        result = await service.attach_manager(user)

        assert result.manager is None


class TestFindUser:

    @pytest.mark.anyio
    async def test_profile_with_domains_roles_and_score(self, service, user_repository, skill_service):
        # Arrange
        user_repository.find_user_by_id.return_value = {"id": 1, "diploma": "2010", "name": "Julien"}
        user_repository.find_user_roles_by_id.return_value = ["Manager"]
        skill_service.find_user_skills_by_id.return_value = [
            DomainSkills(id=10, name="Mobile", color="#6186ea", score=3, skills=[
                UserSkillView(id=7, skill_id=40, name="Ionic", level=3, interested=True,
                              date="2016-11-10 13:06:52"),
            ]),
            DomainSkills(id=None, name=None, score=2),
        ]

        # Act
        profile = await service.find_user_by_id(1)

        # Assert
        assert profile.roles == ["Manager"]
        assert profile.score == 5
        assert profile.domains[0].skills[0].name == "Ionic"
        assert profile.manager is None
        skill_service.find_user_skills_by_id.assert_awaited_once_with(1)

    @pytest.mark.anyio
    async def test_missing_user(self, service, user_repository):
        user_repository.find_user_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.find_user_by_id(404)


class TestUserMutations:

    @pytest.mark.anyio
    async def test_update_user(self, service, user_repository):
        user_repository.update_user.return_value = True
        user_repository.find_user_by_id.return_value = {"id": 234, "name": "Julien"}
        user_repository.find_user_roles_by_id.return_value = []

        await service.update_user(234, {})

        user_repository.update_user.assert_awaited_once_with(234, {})

    @pytest.mark.anyio
    async def test_update_user_email_taken_by_someone_else(self, service, user_repository):
        user_repository.find_user_by_email.return_value = {"id": 7, "email": "taken@xebia.fr"}

        with pytest.raises(ConflictError):
            await service.update_user(234, {"email": "taken@xebia.fr"})

        user_repository.update_user.assert_not_awaited()

    @pytest.mark.anyio
    async def test_update_missing_user(self, service, user_repository):
        user_repository.update_user.return_value = False

        with pytest.raises(NotFoundError):
            await service.update_user(234, {"name": "Bob"})

    @pytest.mark.anyio
    async def test_update_password(self, service, user_repository):
        await service.update_password(234, "p1", "p2")

        user_repository.update_password.assert_awaited_once_with(234, "p1", "p2")

    @pytest.mark.anyio
    async def test_update_phone(self, service, user_repository):
        user_repository.update_phone.return_value = True
        user_repository.find_user_by_id.return_value = {"id": 234, "name": "Julien"}
        user_repository.find_user_roles_by_id.return_value = []

        profile = await service.update_phone(234, "0134567897")

        user_repository.update_phone.assert_awaited_once_with(234, "0134567897")
        assert profile.id == 234

    @pytest.mark.anyio
    async def test_update_address(self, service, user_repository):
        address = {"formatted_address": "1 rue du yaourt"}
        user_repository.update_address.return_value = True
        user_repository.find_user_by_id.return_value = {"id": 234, "name": "Julien"}
        user_repository.find_user_roles_by_id.return_value = []

        await service.update_address(234, address)

        user_repository.update_address.assert_awaited_once_with(234, address)

    @pytest.mark.anyio
    async def test_promote_to_manager(self, service, user_repository):
        user_repository.find_user_by_id.return_value = {"id": 234, "name": "Julien"}
        user_repository.find_user_roles_by_id.return_value = ["Manager"]

        profile = await service.promote_to_manager(234)

        user_repository.add_role.assert_awaited_once_with({"id": 234, "name": "Julien"}, "Manager")
        assert profile.roles == ["Manager"]

    @pytest.mark.anyio
    async def test_promote_missing_user(self, service, user_repository):
        user_repository.find_user_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.promote_to_manager(234)

        user_repository.add_role.assert_not_awaited()

    @pytest.mark.anyio
    async def test_assign_manager(self, service, user_repository):
        user_repository.find_user_by_id.return_value = {"id": 123, "name": "Alban"}
        user_repository.find_user_roles_by_id.return_value = []
        user_repository.assign_manager.return_value = True

        await service.assign_manager(234, 123)

        user_repository.assign_manager.assert_awaited_once_with(234, 123)

    @pytest.mark.anyio
    async def test_assign_self_as_manager_is_rejected(self, service, user_repository):
        with pytest.raises(ValidationError):
            await service.assign_manager(234, 234)

        user_repository.assign_manager.assert_not_awaited()

    @pytest.mark.anyio
    async def test_assign_missing_manager(self, service, user_repository):
        user_repository.find_user_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await service.assign_manager(234, 999)

        user_repository.assign_manager.assert_not_awaited()

    @pytest.mark.anyio
    async def test_clear_manager(self, service, user_repository):
        user_repository.assign_manager.return_value = True
        user_repository.find_user_by_id.return_value = {"id": 234, "name": "Julien"}
        user_repository.find_user_roles_by_id.return_value = []

        await service.assign_manager(234, None)

        user_repository.assign_manager.assert_awaited_once_with(234, None)

    @pytest.mark.anyio
    async def test_delete_user(self, service, user_repository):
        user_repository.delete_user_by_id.return_value = True

        await service.delete_user_by_id(234)

        user_repository.delete_user_by_id.assert_awaited_once_with(234)

    @pytest.mark.anyio
    async def test_delete_missing_user(self, service, user_repository):
        user_repository.delete_user_by_id.return_value = False

        with pytest.raises(NotFoundError):
            await service.delete_user_by_id(234)


class TestListings:

    @pytest.mark.anyio
    async def test_get_users(self, service, user_repository):
        user_repository.get_users.return_value = [{"id": 1, "diploma": "2010", "name": "Julien"}]

        users = await service.get_users()

        assert [u.model_dump(by_alias=True) for u in users] == [_julien()]
        user_repository.get_users_with_roles.assert_not_awaited()

    @pytest.mark.anyio
    async def test_get_users_with_roles(self, service, user_repository):
        user_repository.get_users_with_roles.return_value = [
            {"id": 1, "diploma": "2010", "name": "Julien"}
        ]

        users = await service.get_users(with_roles="Manager")

        user_repository.get_users_with_roles.assert_awaited_once_with("Manager")
        assert [u.model_dump(by_alias=True) for u in users] == [_julien()]

    @pytest.mark.anyio
    async def test_get_users_mobile(self, service, user_repository, skill_service):
        # Arrange
        row = {"id": 1, "diploma": "2010", "name": "Julien"}
        user_repository.get_users.return_value = [row]
        user_repository.find_user_by_id.return_value = row
        user_repository.find_user_roles_by_id.return_value = []

        # Act
        users = await service.get_users_mobile_version()

        # Assert
        assert [u.model_dump(by_alias=True) for u in users] == [
            _julien(domains=[], roles=[], score=0)
        ]
        skill_service.find_user_skills_by_id.assert_awaited_once_with(1)

    @pytest.mark.anyio
    async def test_get_users_with_roles_mobile(self, service, user_repository):
        row = {"id": 1, "diploma": "2010", "name": "Julien"}
        user_repository.get_users_with_roles.return_value = [row]
        user_repository.find_user_by_id.return_value = row
        user_repository.find_user_roles_by_id.return_value = ["Manager"]

        users = await service.get_users_mobile_version(with_roles="Manager")

        assert [u.model_dump(by_alias=True) for u in users] == [
            _julien(domains=[], roles=["Manager"], score=0)
        ]

    @pytest.mark.anyio
    async def test_get_users_web_version(self, service, user_repository):
        # Arrange
        user_repository.get_web_users_with_roles.return_value = [
            {
                "user_id": 2,
                "user_name": "Julien",
                "email": "jsmadja@xebia.fr",
                "diploma": "2010",
                "domain_id": 4,
                "domain_name": "Back",
                "domain_score": 7,
                "domain_color": "black",
            }
        ]

        # Act
        users = await service.get_users_web_version(with_roles="Manager")

        # Assert
        user_repository.get_web_users_with_roles.assert_awaited_once_with("Manager")
        assert [u.model_dump(by_alias=True) for u in users] == [
            {
                "id": 2,
                "name": "Julien",
                "readable_id": "julien",
                "experienceCounter": 6,
                "gravatarUrl": "//www.gravatar.com/avatar/7cad4fe46a8abe2eab1263b02b3c12bc",
                "domains": [{"id": 4, "name": "Back", "color": "black", "score": 7}],
                "score": 7,
            }
        ]

    @pytest.mark.anyio
    async def test_web_version_merges_domains_per_user(self, service, user_repository):
        base = {"user_id": 2, "user_name": "Julien", "email": "jsmadja@xebia.fr", "diploma": None}
        user_repository.get_web_users_with_roles.return_value = [
            {**base, "domain_id": 4, "domain_name": "Back", "domain_score": 7, "domain_color": "black"},
            {**base, "domain_id": 5, "domain_name": "Data", "domain_score": 2, "domain_color": None},
            {"user_id": 3, "user_name": "Zoé", "email": None, "diploma": None,
             "domain_id": None, "domain_name": None, "domain_score": 0, "domain_color": None},
        ]

        users = await service.get_users_web_version()

        assert [u.id for u in users] == [2, 3]
        assert [d.name for d in users[0].domains] == ["Back", "Data"]
        assert users[0].score == 9
        assert users[1].domains == []
        assert users[1].score == 0


class TestUpdates:

    @pytest.mark.anyio
    async def test_get_updates(self, service, user_repository):
        # Arrange
        base = {
            "user_diploma": None,
            "user_email": "mohayon@xebia.fr",
            "user_id": 272,
            "user_name": "Michaël OHAYON",
            "skill_level": 1,
        }
        user_repository.get_updates.return_value = [
            {**base, "color": "#6186ea", "domain_id": 10, "domain_name": "Mobile",
             "skill_id": 1040, "skill_interested": False, "skill_name": "Ionic",
             "skill_date": "2016-11-10 13:06:52", "user_skill_id": 7730},
            {**base, "color": "#d7d5d0", "domain_id": 5, "domain_name": "Data",
             "skill_id": 943, "skill_interested": True, "skill_name": "tensorflow",
             "skill_date": "2016-11-10 13:05:37", "user_skill_id": 7729},
            {**base, "color": "#6186ea", "domain_id": 10, "domain_name": "Mobile",
             "skill_id": 940, "skill_interested": True, "skill_name": "Firebase",
             "skill_date": "2016-11-10 13:04:37", "user_skill_id": 7728},
        ]

        # Act
        updates = await service.get_updates()

        # Assert
        user_repository.get_updates.assert_awaited_once_with(50)
        assert [u.model_dump(by_alias=True) for u in updates] == [
            {
                "user": {
                    "id": 272,
                    "name": "Michaël OHAYON",
                    "readable_id": "michaël-ohayon",
                    "manager_id": None,
                    "phone": None,
                    "address": None,
                    "experienceCounter": 0,
                    "gravatarUrl": "//www.gravatar.com/avatar/fd10bdaf3f264f4054a95ceaa6118b14",
                },
                "updates": [
                    {
                        "id": 7730,
                        "date": "2016-11-10 13:06:52",
                        "skill": {"id": 1040, "name": "Ionic", "level": 1, "interested": False,
                                  "domain": "Mobile", "color": "#6186ea"},
                    },
                    {
                        "id": 7729,
                        "date": "2016-11-10 13:05:37",
                        "skill": {"id": 943, "name": "tensorflow", "level": 1, "interested": True,
                                  "domain": "Data", "color": "#d7d5d0"},
                    },
                    {
                        "id": 7728,
                        "date": "2016-11-10 13:04:37",
                        "skill": {"id": 940, "name": "Firebase", "level": 1, "interested": True,
                                  "domain": "Mobile", "color": "#6186ea"},
                    },
                ],
            }
        ]

    @pytest.mark.anyio
    async def test_updates_grouped_by_user_in_first_appearance_order(self, user_repository, skill_service):
        # Arrange
        service = UserService(user_repository, skill_service, today=lambda: TODAY, updates_limit=3)

        def row(user_id, user_skill_id):
            return {
                "user_id": user_id, "user_name": f"User {user_id}", "user_email": None,
                "user_diploma": None, "skill_id": 1, "skill_name": "Java", "skill_level": 2,
                "skill_interested": 0, "skill_date": "2016-11-10 13:00:00",
                "user_skill_id": user_skill_id, "domain_id": None, "domain_name": None,
                "color": None,
            }

        user_repository.get_updates.return_value = [row(2, 30), row(1, 20), row(2, 10)]

        # Act
        updates = await service.get_updates()

        # Assert
        user_repository.get_updates.assert_awaited_once_with(3)
        assert [entry.user.id for entry in updates] == [2, 1]
        assert [u.id for u in updates[0].updates] == [30, 10]
        assert updates[0].updates[0].skill.interested is False
        assert updates[0].updates[0].skill.domain is None


    @pytest.mark.anyio
    async def test_updates_report_stored_interest(self, service, user_repository):
        user_repository.get_updates.return_value = [
            {"user_id": 1, "user_name": "Julien", "user_email": "jsmadja@xebia.fr",
             "user_diploma": "2010", "skill_id": 4, "skill_name": "Elm", "skill_level": 0,
             "skill_interested": 1, "skill_date": "2016-11-10 13:00:00",
             "user_skill_id": 12, "domain_id": None, "domain_name": None, "color": None},
        ]

        updates = await service.get_updates()

        assert updates[0].updates[0].skill.interested is True


class TestSignUp:


    @pytest.mark.anyio
    async def test_sign_up_hashes_password(self, service, user_repository):
        # Arrange
        user_repository.email_exists.return_value = False
        user_repository.create_user.return_value = {
            "id": 9, "name": "Julien", "email": "jsmadja@xebia.fr"
        }

        # Act
        user = await service.sign_up("Julien", "jsmadja@xebia.fr", "s3cret-pass")

        # Assert
        assert user.id == 9
        kwargs = user_repository.create_user.await_args.kwargs
        assert kwargs["email"] == "jsmadja@xebia.fr"
        assert kwargs["hashed_password"] != "s3cret-pass"
        assert verify_password("s3cret-pass", kwargs["hashed_password"])

    @pytest.mark.anyio
    async def test_duplicate_email(self, service, user_repository):
        user_repository.email_exists.return_value = True

        with pytest.raises(ConflictError):
            await service.sign_up("Julien", "jsmadja@xebia.fr", "s3cret-pass")

        user_repository.create_user.assert_not_awaited()
