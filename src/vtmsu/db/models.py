"""
vtmsu.db.models

Persistence schema for the game-management application.

Responsibilities:
- Define ORM models for:
  - auth storage: User, Account, Session, VerificationToken
  - chronicle data: Character, Clan, Faction, Ability, Feature and their join tables
  - hunting: HuntingGround, HuntingData, HuntingInstance, HuntingDescription, Hunt
  - content: Post, Rule
  - shop: Product, ProductImage
- Make every on-delete policy explicit at the foreign-key level.

Physical column names keep the established database naming (`createdById`,
`created_at`, `updatedAt`, ...); Python attributes are snake_case.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Double,
    Enum,
    ForeignKey,
    Index,
    Integer,
    PrimaryKeyConstraint,
    String,
    Text,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vtmsu.db.base import Base, fk, table_name


def _new_user_id() -> str:
    return str(uuid.uuid4())


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class HuntStatus(enum.StrEnum):
    # Stored verbatim; the CHECK constraint rejects anything else.
    success = "success"
    exp_failure = "exp_failure"
    req_failure = "req_failure"
    masq_failure = "masq_failure"


class AccountType(enum.StrEnum):
    oauth = "oauth"
    oidc = "oidc"
    email = "email"
    webauthn = "webauthn"


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        "created_at", DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        "updatedAt", DateTime(timezone=True), onupdate=func.now(), nullable=True
    )


# --- Auth storage -------------------------------------------------------------


class User(Base):
    __tablename__ = table_name("user")

    id: Mapped[str] = mapped_column(String(255), primary_key=True, default=_new_user_id)
    name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    email_verified: Mapped[datetime | None] = mapped_column(
        "emailVerified", DateTime(timezone=True), server_default=func.now()
    )
    image: Mapped[str | None] = mapped_column(String(255))

    accounts: Mapped[list[Account]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    sessions: Mapped[list[Session]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    # Authored content blocks user deletion (RESTRICT); never null it out from the ORM side.
    posts: Mapped[list[Post]] = relationship(back_populates="created_by", passive_deletes="all")
    rules: Mapped[list[Rule]] = relationship(back_populates="created_by", passive_deletes="all")
    characters: Mapped[list[Character]] = relationship(
        back_populates="created_by", passive_deletes="all"
    )
    hunts: Mapped[list[Hunt]] = relationship(back_populates="created_by", passive_deletes="all")


class Account(Base):
    __tablename__ = table_name("account")

    user_id: Mapped[str] = mapped_column(
        "userId", String(255), ForeignKey(fk("user"), ondelete="CASCADE"), nullable=False
    )
    type: Mapped[AccountType] = mapped_column(
        Enum(
            AccountType,
            native_enum=False,
            length=255,
            values_callable=_enum_values,
        ),
        nullable=False,
    )
    provider: Mapped[str] = mapped_column(String(255), nullable=False)
    provider_account_id: Mapped[str] = mapped_column(
        "providerAccountId", String(255), nullable=False
    )
    refresh_token: Mapped[str | None] = mapped_column(Text)
    access_token: Mapped[str | None] = mapped_column(Text)
    expires_at: Mapped[int | None] = mapped_column(Integer)
    token_type: Mapped[str | None] = mapped_column(String(255))
    scope: Mapped[str | None] = mapped_column(String(255))
    id_token: Mapped[str | None] = mapped_column(Text)
    session_state: Mapped[str | None] = mapped_column(String(255))

    user: Mapped[User] = relationship(back_populates="accounts")

    __table_args__ = (
        PrimaryKeyConstraint("provider", "providerAccountId"),
        Index("account_userId_idx", "userId"),
    )


class Session(Base):
    __tablename__ = table_name("session")

    session_token: Mapped[str] = mapped_column("sessionToken", String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        "userId", String(255), ForeignKey(fk("user"), ondelete="CASCADE"), nullable=False
    )
    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped[User] = relationship(back_populates="sessions")

    __table_args__ = (Index("session_userId_idx", "userId"),)


class VerificationToken(Base):
    __tablename__ = table_name("verificationToken")

    identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    token: Mapped[str] = mapped_column(String(255), nullable=False)
    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (PrimaryKeyConstraint("identifier", "token"),)


# --- Content ------------------------------------------------------------------


class Post(TimestampMixin, Base):
    __tablename__ = table_name("post")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    content: Mapped[str | None] = mapped_column(Text)
    created_by_id: Mapped[str] = mapped_column(
        "createdById", String(255), ForeignKey(fk("user"), ondelete="RESTRICT"), nullable=False
    )

    created_by: Mapped[User] = relationship(back_populates="posts")

    __table_args__ = (
        Index("createdById_idx", "createdById"),
        Index("post_name_idx", "name"),
    )


class Rule(TimestampMixin, Base):
    __tablename__ = table_name("rule")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    link: Mapped[str | None] = mapped_column(String(255))
    category_id: Mapped[int | None] = mapped_column("categoryId", Integer)
    ordered_as: Mapped[int | None] = mapped_column("orderedAs", Integer)
    content: Mapped[str | None] = mapped_column(Text)
    created_by_id: Mapped[str] = mapped_column(
        "createdById", String(255), ForeignKey(fk("user"), ondelete="RESTRICT"), nullable=False
    )

    created_by: Mapped[User] = relationship(back_populates="rules")


# --- Hunting ------------------------------------------------------------------


class HuntingGround(TimestampMixin, Base):
    __tablename__ = table_name("huntingGround")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    radius: Mapped[int | None] = mapped_column(Integer)
    max_inst: Mapped[int | None] = mapped_column(Integer)
    min_inst: Mapped[int | None] = mapped_column(Integer, default=0, server_default="0")
    # Respawn delay in seconds.
    delay: Mapped[int | None] = mapped_column(Integer, default=3600, server_default="3600")
    coord_y: Mapped[float | None] = mapped_column("coordY", Double)
    coord_x: Mapped[float | None] = mapped_column("coordX", Double)
    content: Mapped[str | None] = mapped_column(Text)

    instances: Mapped[list[HuntingInstance]] = relationship(
        back_populates="ground", passive_deletes=True
    )


class HuntingData(Base):
    __tablename__ = table_name("huntingData")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    image: Mapped[str | None] = mapped_column(String(255))
    hunt_req: Mapped[str | None] = mapped_column(String(255))

    descriptions: Mapped[list[HuntingDescription]] = relationship(
        back_populates="target", cascade="all, delete-orphan", passive_deletes=True
    )
    instances: Mapped[list[HuntingInstance]] = relationship(
        back_populates="target", cascade="all, delete-orphan", passive_deletes=True
    )


class HuntingInstance(TimestampMixin, Base):
    __tablename__ = table_name("huntingInstance")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    remains: Mapped[int | None] = mapped_column(Integer)
    coord_y: Mapped[float | None] = mapped_column("coordY", Double)
    coord_x: Mapped[float | None] = mapped_column("coordX", Double)
    temporary: Mapped[bool | None] = mapped_column(Boolean)
    expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    target_id: Mapped[int] = mapped_column(
        "targetId", Integer, ForeignKey(fk("huntingData"), ondelete="CASCADE"), nullable=False
    )
    ground_id: Mapped[int | None] = mapped_column(
        "groundId", Integer, ForeignKey(fk("huntingGround"), ondelete="SET NULL"), nullable=True
    )

    target: Mapped[HuntingData] = relationship(back_populates="instances")
    ground: Mapped[HuntingGround | None] = relationship(back_populates="instances")
    hunts: Mapped[list[Hunt]] = relationship(back_populates="instance", passive_deletes=True)


class HuntingDescription(Base):
    __tablename__ = table_name("huntingDescription")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    target_id: Mapped[int] = mapped_column(
        "targetId", Integer, ForeignKey(fk("huntingData"), ondelete="CASCADE"), nullable=False
    )
    remains: Mapped[int | None] = mapped_column(Integer)
    content: Mapped[str | None] = mapped_column(Text)

    target: Mapped[HuntingData] = relationship(back_populates="descriptions")


class Hunt(TimestampMixin, Base):
    __tablename__ = table_name("hunt")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    instance_id: Mapped[int | None] = mapped_column(
        "instanceId",
        Integer,
        ForeignKey(fk("huntingInstance"), ondelete="SET NULL"),
        nullable=True,
    )
    character_id: Mapped[int] = mapped_column(
        "characterId",
        Integer,
        ForeignKey(fk("character"), ondelete="RESTRICT"),
        nullable=False,
    )
    created_by_id: Mapped[str] = mapped_column(
        "createdById", String(255), ForeignKey(fk("user"), ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[HuntStatus] = mapped_column(
        Enum(
            HuntStatus,
            native_enum=False,
            length=255,
            create_constraint=True,
            name="hunt_status",
            values_callable=_enum_values,
        ),
        nullable=False,
    )

    created_by: Mapped[User] = relationship(back_populates="hunts")
    character: Mapped[Character] = relationship(back_populates="hunts")
    instance: Mapped[HuntingInstance | None] = relationship(back_populates="hunts")


# --- Chronicle ----------------------------------------------------------------


class Character(TimestampMixin, Base):
    __tablename__ = table_name("character")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    faction_id: Mapped[int | None] = mapped_column(
        "factionId", Integer, ForeignKey(fk("faction"), ondelete="SET NULL"), nullable=True
    )
    clan_id: Mapped[int | None] = mapped_column(
        "clanId", Integer, ForeignKey(fk("clan"), ondelete="SET NULL"), nullable=True
    )
    visible: Mapped[bool | None] = mapped_column(Boolean, default=False, server_default=false())
    additional_abilities: Mapped[int | None] = mapped_column("additionalAbilities", Integer)
    player_id: Mapped[str | None] = mapped_column("playerId", String(255))
    player_name: Mapped[str | None] = mapped_column("playerName", String(255))
    player_contact: Mapped[str | None] = mapped_column("playerContact", String(255))
    image: Mapped[str | None] = mapped_column(String(255))
    age: Mapped[str | None] = mapped_column(String(255))
    sire: Mapped[str | None] = mapped_column(String(255))
    title: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str | None] = mapped_column(String(255))
    childer: Mapped[str | None] = mapped_column(String(255))
    hunt_req: Mapped[str | None] = mapped_column(String(255))
    comment: Mapped[str | None] = mapped_column(Text)
    p_comment: Mapped[str | None] = mapped_column(Text)
    pending: Mapped[bool | None] = mapped_column(Boolean, default=False, server_default=false())
    verified: Mapped[bool | None] = mapped_column(Boolean, default=False, server_default=false())
    ambition: Mapped[str | None] = mapped_column(Text)
    public_info: Mapped[str | None] = mapped_column("publicIngo", Text)
    content: Mapped[str | None] = mapped_column(Text)
    created_by_id: Mapped[str] = mapped_column(
        "createdById", String(255), ForeignKey(fk("user"), ondelete="RESTRICT"), nullable=False
    )

    created_by: Mapped[User] = relationship(back_populates="characters")
    clan: Mapped[Clan | None] = relationship(back_populates="characters")
    faction: Mapped[Faction | None] = relationship(back_populates="characters")
    abilities: Mapped[list[CharacterAbility]] = relationship(
        back_populates="character", cascade="all, delete-orphan", passive_deletes=True
    )
    features: Mapped[list[CharacterFeature]] = relationship(
        back_populates="character", cascade="all, delete-orphan", passive_deletes=True
    )
    hunts: Mapped[list[Hunt]] = relationship(back_populates="character", passive_deletes="all")


class Clan(Base):
    __tablename__ = table_name("clan")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    content: Mapped[str | None] = mapped_column(Text)
    icon: Mapped[str | None] = mapped_column(String(255))
    visible_to_player: Mapped[bool | None] = mapped_column(
        "visibleToPlayer", Boolean, default=False, server_default=false()
    )

    # Characters keep existing when their clan goes away (SET NULL in the DB).
    characters: Mapped[list[Character]] = relationship(back_populates="clan", passive_deletes=True)
    clan_in_faction: Mapped[list[ClanInFaction]] = relationship(
        back_populates="clan", cascade="all, delete-orphan", passive_deletes=True
    )
    ability_available: Mapped[list[AbilityAvailable]] = relationship(
        back_populates="clan", cascade="all, delete-orphan", passive_deletes=True
    )
    feature_available: Mapped[list[FeatureAvailable]] = relationship(
        back_populates="clan", cascade="all, delete-orphan", passive_deletes=True
    )
    factions: Mapped[list[Faction]] = relationship(
        secondary=lambda: ClanInFaction.__table__, viewonly=True
    )


class Faction(Base):
    __tablename__ = table_name("faction")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    icon: Mapped[str | None] = mapped_column(String(255))
    content: Mapped[str | None] = mapped_column(Text)
    visible_to_player: Mapped[bool | None] = mapped_column(
        "visibleToPlayer", Boolean, default=False, server_default=false()
    )

    characters: Mapped[list[Character]] = relationship(
        back_populates="faction", passive_deletes=True
    )
    clan_in_faction: Mapped[list[ClanInFaction]] = relationship(
        back_populates="faction", cascade="all, delete-orphan", passive_deletes=True
    )
    clans: Mapped[list[Clan]] = relationship(
        secondary=lambda: ClanInFaction.__table__, viewonly=True
    )


class ClanInFaction(Base):
    __tablename__ = table_name("clanInFaction")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    clan_id: Mapped[int] = mapped_column(
        "clanId", Integer, ForeignKey(fk("clan"), ondelete="CASCADE"), nullable=False
    )
    faction_id: Mapped[int] = mapped_column(
        "factionId", Integer, ForeignKey(fk("faction"), ondelete="CASCADE"), nullable=False
    )

    clan: Mapped[Clan] = relationship(back_populates="clan_in_faction")
    faction: Mapped[Faction] = relationship(back_populates="clan_in_faction")


class Ability(Base):
    __tablename__ = table_name("ability")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    icon: Mapped[str | None] = mapped_column(String(255))
    expertise: Mapped[bool | None] = mapped_column(Boolean, default=False, server_default=false())
    # Free-form pointer to a prerequisite ability; not enforced as a foreign key.
    requirement_id: Mapped[int | None] = mapped_column("requirementId", Integer)
    content: Mapped[str | None] = mapped_column(Text)
    visible_to_player: Mapped[bool | None] = mapped_column(
        "visibleToPlayer", Boolean, default=False, server_default=false()
    )

    character_abilities: Mapped[list[CharacterAbility]] = relationship(
        back_populates="ability", cascade="all, delete-orphan", passive_deletes=True
    )
    ability_available: Mapped[list[AbilityAvailable]] = relationship(
        back_populates="ability", cascade="all, delete-orphan", passive_deletes=True
    )


class AbilityAvailable(Base):
    __tablename__ = table_name("abilityAvailable")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ability_id: Mapped[int] = mapped_column(
        "abilityId", Integer, ForeignKey(fk("ability"), ondelete="CASCADE"), nullable=False
    )
    clan_id: Mapped[int] = mapped_column(
        "clanId", Integer, ForeignKey(fk("clan"), ondelete="CASCADE"), nullable=False
    )

    ability: Mapped[Ability] = relationship(back_populates="ability_available")
    clan: Mapped[Clan] = relationship(back_populates="ability_available")


class CharacterAbility(Base):
    __tablename__ = table_name("characterAbilities")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[int] = mapped_column(
        "characterId", Integer, ForeignKey(fk("character"), ondelete="CASCADE"), nullable=False
    )
    ability_id: Mapped[int | None] = mapped_column(
        "abilityId", Integer, ForeignKey(fk("ability"), ondelete="CASCADE"), nullable=True
    )

    ability: Mapped[Ability | None] = relationship(back_populates="character_abilities")
    character: Mapped[Character] = relationship(back_populates="abilities")


class Feature(Base):
    __tablename__ = table_name("feature")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(256))
    cost: Mapped[int | None] = mapped_column(Integer)
    content: Mapped[str | None] = mapped_column(Text)
    visible_to_player: Mapped[bool | None] = mapped_column(
        "visibleToPlayer", Boolean, default=False, server_default=false()
    )

    character_features: Mapped[list[CharacterFeature]] = relationship(
        back_populates="feature", cascade="all, delete-orphan", passive_deletes=True
    )
    feature_available: Mapped[list[FeatureAvailable]] = relationship(
        back_populates="feature", cascade="all, delete-orphan", passive_deletes=True
    )


class FeatureAvailable(Base):
    __tablename__ = table_name("featureAvailable")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Physical name is "abilityId" in the deployed layout; it references feature.id.
    feature_id: Mapped[int] = mapped_column(
        "abilityId", Integer, ForeignKey(fk("feature"), ondelete="CASCADE"), nullable=False
    )
    clan_id: Mapped[int] = mapped_column(
        "clanId", Integer, ForeignKey(fk("clan"), ondelete="CASCADE"), nullable=False
    )

    feature: Mapped[Feature] = relationship(back_populates="feature_available")
    clan: Mapped[Clan] = relationship(back_populates="feature_available")


class CharacterFeature(Base):
    __tablename__ = table_name("characterFeatures")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    character_id: Mapped[int] = mapped_column(
        "characterId", Integer, ForeignKey(fk("character"), ondelete="CASCADE"), nullable=False
    )
    feature_id: Mapped[int | None] = mapped_column(
        "featureId", Integer, ForeignKey(fk("feature"), ondelete="CASCADE"), nullable=True
    )
    description: Mapped[str | None] = mapped_column(Text)
    visible_to_player: Mapped[bool | None] = mapped_column(
        "visibleToPlayer", Boolean, default=False, server_default=false()
    )

    feature: Mapped[Feature | None] = relationship(back_populates="character_features")
    character: Mapped[Character] = relationship(back_populates="features")


# --- Shop ---------------------------------------------------------------------


class Product(TimestampMixin, Base):
    __tablename__ = table_name("product")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str | None] = mapped_column(String(256))
    subtitle: Mapped[str | None] = mapped_column(String(256))
    description: Mapped[str | None] = mapped_column(Text)
    size: Mapped[str | None] = mapped_column(String(256))
    price: Mapped[float | None] = mapped_column(Double)
    color: Mapped[str | None] = mapped_column(String(256))
    colors_available: Mapped[str | None] = mapped_column("colorsAvailable", String(256))
    stock: Mapped[int | None] = mapped_column(Integer)

    images: Mapped[list[ProductImage]] = relationship(
        back_populates="product", cascade="all, delete-orphan", passive_deletes=True
    )


class ProductImage(Base):
    __tablename__ = table_name("productImage")

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        "productId", Integer, ForeignKey(fk("product"), ondelete="CASCADE"), nullable=False
    )
    source: Mapped[str | None] = mapped_column(String(255))

    product: Mapped[Product] = relationship(back_populates="images")


# --- Module Notes -----------------------------------------------------------
# On-delete policy summary:
# - CASCADE: join tables, hunting descriptions/instances, product images, auth rows.
# - SET NULL: character clan/faction, instance ground, hunt instance.
# - RESTRICT: every creator reference and hunt -> character.
