"""
Unit tests for SkillRepository against an in-memory SQLite database.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from skillz.models import Domain
from skillz.repositories.skill import SkillRepository
from skillz.repositories.user import UserRepository


@pytest.fixture
async def mobile(async_session: AsyncSession) -> Domain:
    domain = Domain(name="Mobile", color="#6186ea")
    async_session.add(domain)
    await async_session.flush()
    return domain


class TestCatalogue:

    @pytest.mark.anyio
    async def test_create_and_list_skills(self, async_session: AsyncSession, mobile: Domain):
        # Arrange
        repo = SkillRepository(async_session)

        # Act
        ionic = await repo.create_skill(" Ionic ", mobile.id)
        cobol = await repo.create_skill("COBOL")
        skills = await repo.get_skills()

        # Assert
        assert ionic == {
            "id": ionic["id"], "name": "Ionic", "domain_id": mobile.id,
            "domain_name": "Mobile", "domain_color": "#6186ea",
        }
        assert cobol["domain_id"] is None
        assert [s["name"] for s in skills] == ["COBOL", "Ionic"]

    @pytest.mark.anyio
    async def test_find_skill_by_name_is_case_insensitive(self, async_session: AsyncSession):
        repo = SkillRepository(async_session)
        created = await repo.create_skill("TensorFlow")

        assert (await repo.find_skill_by_name("tensorflow"))["id"] == created["id"]
        assert await repo.find_skill_by_name("pytorch") is None

    @pytest.mark.anyio
    async def test_set_skill_domain(self, async_session: AsyncSession, mobile: Domain):
        repo = SkillRepository(async_session)
        skill = await repo.create_skill("Firebase")

        assert await repo.set_skill_domain(skill["id"], mobile.id) is True
        assert (await repo.find_skill_by_id(skill["id"]))["domain_name"] == "Mobile"
        assert await repo.set_skill_domain(404, mobile.id) is False

    @pytest.mark.anyio
    async def test_delete_skill(self, async_session: AsyncSession):
        repo = SkillRepository(async_session)
        skill = await repo.create_skill("Flash")

        assert await repo.delete_skill(skill["id"]) is True
        assert await repo.find_skill_by_id(skill["id"]) is None
        assert await repo.delete_skill(skill["id"]) is False


class TestUserSkills:

    @pytest.mark.anyio
    async def test_add_and_find_user_skills(self, async_session: AsyncSession, mobile: Domain):
        """
        Test recording assessments.

        Arrange: A user, a classified and an unclassified skill
        Act: Add both assessments
        Assert: Rows carry the skill, level, interest and domain
        """
        # Arrange
        users = UserRepository(async_session)
        repo = SkillRepository(async_session)
        user = await users.create_user("Julien", "jsmadja@xebia.fr")
        ionic = await repo.create_skill("Ionic", mobile.id)
        cobol = await repo.create_skill("COBOL")

        # Act
        ionic_id = await repo.add_user_skill(user["id"], ionic["id"], 3, True)
        await repo.add_user_skill(user["id"], cobol["id"], 1, False)
        rows = await repo.find_user_skills_by_id(user["id"])

        # Assert
        by_name = {row["skill_name"]: row for row in rows}
        assert by_name["Ionic"]["user_skill_id"] == ionic_id
        assert by_name["Ionic"]["level"] == 3
        assert by_name["Ionic"]["interested"] is True
        assert by_name["Ionic"]["domain_name"] == "Mobile"
        assert by_name["COBOL"]["domain_id"] is None
        assert len(by_name["Ionic"]["date"]) == 19

    @pytest.mark.anyio
    async def test_update_and_delete_user_skill(self, async_session: AsyncSession):
        # Arrange
        users = UserRepository(async_session)
        repo = SkillRepository(async_session)
        user = await users.create_user("Julien", "jsmadja@xebia.fr")
        other = await users.create_user("Zoé", "zoe@xebia.fr")
        skill = await repo.create_skill("Java")
        user_skill_id = await repo.add_user_skill(user["id"], skill["id"], 1, False)

        # Act
        await repo.update_user_skill(user_skill_id, 2, True)

        # Assert
        row = await repo.find_user_skill(user["id"], skill["id"])
        assert row["level"] == 2
        assert row["interested"] is True
        assert await repo.find_user_skill_by_id(other["id"], user_skill_id) is None
        assert await repo.delete_user_skill(other["id"], user_skill_id) is False
        assert await repo.delete_user_skill(user["id"], user_skill_id) is True
        assert await repo.find_user_skills_by_id(user["id"]) == []

    @pytest.mark.anyio
    async def test_find_users_by_skill_strongest_first(self, async_session: AsyncSession):
        users = UserRepository(async_session)
        repo = SkillRepository(async_session)
        julien = await users.create_user("Julien", "jsmadja@xebia.fr")
        zoe = await users.create_user("Zoé", "zoe@xebia.fr")
        skill = await repo.create_skill("Java")
        await repo.add_user_skill(julien["id"], skill["id"], 1, True)
        await repo.add_user_skill(zoe["id"], skill["id"], 3, False)

        rows = await repo.find_users_by_skill(skill["id"])

        assert [row["id"] for row in rows] == [zoe["id"], julien["id"]]
        assert rows[0]["level"] == 3
        assert rows[0]["email"] == "zoe@xebia.fr"

    @pytest.mark.anyio
    async def test_deleting_skill_removes_assessments(self, async_session: AsyncSession):
        users = UserRepository(async_session)
        repo = SkillRepository(async_session)
        user = await users.create_user("Julien", "jsmadja@xebia.fr")
        skill = await repo.create_skill("Flash")
        await repo.add_user_skill(user["id"], skill["id"], 1, False)

        await repo.delete_skill(skill["id"])

        assert await repo.find_user_skills_by_id(user["id"]) == []
