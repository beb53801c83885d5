"""
Row-to-view transforms shared by the services.

Everything here is pure: repository rows in, schema objects out.
"""

import hashlib
import json
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from skillz.core.logging_config import get_logger
from skillz.schemas.skill import DomainSkills, UserSkillView
from skillz.schemas.user import UserView


logger = get_logger(__name__)

GRAVATAR_BASE_URL = "//www.gravatar.com/avatar/"


def readable_id(name: Optional[str]) -> str:
    """
    URL-friendly form of a name: lower case, spaces become dashes.

    >>> readable_id("Michaël OHAYON")
    'michaël-ohayon'
    """
    return (name or "").lower().replace(" ", "-")


def gravatar_url(email: Optional[str]) -> str:
    """
    Protocol-relative gravatar URL for an email.

    Gravatar hashes the trimmed, lower-cased address; a missing email
    hashes the empty string.
    """
    normalized = (email or "").strip().lower()
    digest = hashlib.md5(normalized.encode("utf-8")).hexdigest()
    return f"{GRAVATAR_BASE_URL}{digest}"


def experience_counter(diploma: Any, today: date) -> int:
    """
    Years elapsed since the diploma year.

    Returns 0 for a missing or unparseable diploma and never goes negative.
    """
    if diploma is None or diploma == "":
        return 0
    try:
        year = int(str(diploma).strip())
    except ValueError:
        return 0
    return max(today.year - year, 0)


def decode_address(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Decode a stored address.

    Legacy rows holding a bare string are wrapped as
    ``{"formatted_address": ...}``.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        return raw
    try:
        decoded = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.debug("Address is not JSON, keeping it as text")
        return {"formatted_address": str(raw)}
    if isinstance(decoded, dict):
        return decoded
    return {"formatted_address": str(decoded)}


def format_user(row: Dict[str, Any], today: date) -> UserView:
    """
    Shape a user row (id, name, email, diploma, phone, address,
    manager_id) into a UserView.
    """
    return UserView(
        id=row["id"],
        name=row["name"],
        readable_id=readable_id(row["name"]),
        manager_id=row.get("manager_id"),
        phone=row.get("phone"),
        address=decode_address(row.get("address")),
        experience_counter=experience_counter(row.get("diploma"), today),
        gravatar_url=gravatar_url(row.get("email")),
    )


def group_user_skills(rows: Iterable[Dict[str, Any]]) -> List[DomainSkills]:
    """
    Merge a user's skill rows into per-domain collections.

    Domains are sorted by name with unclassified skills last; each
    domain's score is the sum of its levels.
    """
    domains: Dict[Optional[int], DomainSkills] = {}
    for row in rows:
        domain_id = row.get("domain_id")
        domain = domains.get(domain_id)
        if domain is None:
            domain = DomainSkills(
                id=domain_id,
                name=row.get("domain_name"),
                color=row.get("domain_color"),
            )
            domains[domain_id] = domain
        domain.skills.append(UserSkillView(
            id=row["user_skill_id"],
            skill_id=row["skill_id"],
            name=row["skill_name"],
            level=row["level"],
            interested=bool(row["interested"]),
            date=row["date"],
        ))
        domain.score += row["level"]

    return sorted(
        domains.values(),
        key=lambda d: (d.id is None, (d.name or "").lower()),
    )
