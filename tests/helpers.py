from __future__ import annotations

import inspect
import itertools
from asyncio import AbstractEventLoop
from collections import ChainMap, defaultdict
from typing import Iterable, Optional, Union
from unittest import mock

import discord
import discord.mixins
from discord import Interaction
from discord.commands import ApplicationContext
from discord.types.member import MemberWithUser

from src.bot import Bot


class HashableMixin(discord.mixins.EqualityComparable):
    """Hash mocks by their plain `id`, without the bit-shift of `discord.mixins.Hashable`."""

    def __hash__(self):
        return self.id


class ColourMixin:
    """Alias `color` to `colour` like the discord models do."""

    def __init__(self):
        self.colour = None
        self.accent_colour = None

    @property
    def color(self) -> discord.Colour:
        return self.colour

    @color.setter
    def color(self, color: discord.Colour) -> None:
        self.colour = color


_async_attributes_cache: dict[type, frozenset[str]] = {}


def async_attributes(spec: object) -> frozenset[str]:
    """Names of the coroutine functions defined on the class of `spec`."""
    klass = type(spec)
    if klass not in _async_attributes_cache:
        _async_attributes_cache[klass] = frozenset(
            name for name in dir(klass) if inspect.iscoroutinefunction(inspect.getattr_static(klass, name, None))
        )
    return _async_attributes_cache[klass]


class CustomMockMixin:
    """
    Shared behaviour of the discord mocks.

    Each mock follows `spec_set`, a real discord object, so touching an attribute the model lacks raises.
    Children standing for coroutine methods of the model are AsyncMocks. Methods which return awaitables
    without being coroutine functions are listed in `additional_spec_asyncs`.
    """

    child_mock_type = mock.MagicMock
    discord_id = itertools.count(0)
    spec_set = None
    additional_spec_asyncs = None

    def __init__(self, **kwargs):
        # `name` means something else to Mock, so it is set after construction.
        name = kwargs.pop("name", None)
        super().__init__(spec_set=self.spec_set, **kwargs)

        if name:
            self.name = name

    def _get_child_mock(self, **kwargs) -> Union[mock.MagicMock, mock.AsyncMock]:
        """Create children as plain mocks so the custom mock classes do not propagate."""
        _new_name = kwargs.get("_new_name")
        if _new_name in async_attributes(self.spec_set) or _new_name in (self.additional_spec_asyncs or ()):
            return mock.AsyncMock(**kwargs)

        if isinstance(self, mock.MagicMock) and _new_name in mock._async_method_magics:
            klass = mock.AsyncMock
        else:
            klass = self.child_mock_type

        if self._mock_sealed:
            attribute = "." + kwargs["name"] if "name" in kwargs else "()"
            raise AttributeError(self._extract_mock_name() + attribute)

        return klass(**kwargs)


guild_instance = discord.Guild(
    data={
        "id": 1,
        "name": "guild",
        "verification_level": 2,
        "default_notications": 1,
        "afk_timeout": 100,
        "icon": "icon.png",
        "banner": "banner.png",
        "mfa_level": 1,
        "splash": "splash.png",
        "system_channel_id": 464033278631084042,
        "description": "gban test guild",
        "max_presences": 10_000,
        "max_members": 100_000,
        "preferred_locale": "UTC",
        "owner_id": 1,
        "afk_channel_id": 464033278631084042,
    },
    state=mock.MagicMock(),
)


class MockGuild(CustomMockMixin, mock.Mock, HashableMixin):
    """A `discord.Guild` mock. `ban`, `unban` and `fetch_member` behave as coroutines."""

    spec_set = guild_instance

    def __init__(self, roles: Optional[Iterable[MockRole]] = None, **kwargs) -> None:
        default_kwargs = {"id": next(self.discord_id), "name": "guild", "members": []}
        super().__init__(**ChainMap(kwargs, default_kwargs))

        self.roles = [MockRole(name="@everyone", position=1, id=0)]
        if roles:
            self.roles.extend(roles)


role_instance = discord.Role(guild=guild_instance, state=mock.MagicMock(), data={"name": "role", "id": 1})


class MockRole(CustomMockMixin, mock.Mock, ColourMixin, HashableMixin):
    """A `discord.Role` mock, ordered by `position`."""

    spec_set = role_instance

    def __init__(self, **kwargs) -> None:
        default_kwargs = {
            "id": next(self.discord_id),
            "name": "role",
            "position": 1,
            "colour": discord.Colour(0xdeadbf),
            "permissions": discord.Permissions(),
        }
        super().__init__(**ChainMap(kwargs, default_kwargs))

        if isinstance(self.colour, int):
            self.colour = discord.Colour(self.colour)
        if isinstance(self.permissions, int):
            self.permissions = discord.Permissions(self.permissions)
        if "mention" not in kwargs:
            self.mention = f"&{self.name}"

    def __lt__(self, other):
        return self.position < other.position

    def __ge__(self, other):
        return self.position >= other.position


member_instance = discord.Member(
    data=MemberWithUser(user="staff", roles=[1]), guild=guild_instance, state=mock.MagicMock()
)


class MockMember(CustomMockMixin, mock.Mock, ColourMixin, HashableMixin):
    """A `discord.Member` mock whose `top_role` follows its roles."""

    spec_set = member_instance

    def __init__(self, roles: Optional[Iterable[MockRole]] = None, **kwargs) -> None:
        default_kwargs = {"name": "member", "id": next(self.discord_id), "bot": False, "pending": False}
        super().__init__(**ChainMap(kwargs, default_kwargs))

        self.roles = [MockRole(name="@everyone", position=1, id=0)]
        if roles:
            self.roles.extend(roles)
        self.top_role = max(self.roles)

        if "mention" not in kwargs:
            self.mention = f"@{self.name}"


_user_data = defaultdict(mock.MagicMock)
user_instance = discord.User(data=mock.MagicMock(get=mock.Mock(side_effect=_user_data.get)), state=mock.MagicMock())


class MockUser(CustomMockMixin, mock.Mock, ColourMixin, HashableMixin):
    """A `discord.User` mock, the shape of a ban target that is not a member."""

    spec_set = user_instance

    def __init__(self, **kwargs) -> None:
        default_kwargs = {"name": "user", "id": next(self.discord_id), "bot": False}
        super().__init__(**ChainMap(kwargs, default_kwargs))

        if "mention" not in kwargs:
            self.mention = f"@{self.name}"


def _get_mock_loop() -> mock.Mock:
    """An event loop mock whose `create_task` closes the coroutine instead of scheduling it."""
    loop = mock.create_autospec(spec=AbstractEventLoop, spec_set=True)

    def close_coroutine(coroutine):
        coroutine.close()
        return mock.Mock()

    loop.create_task.side_effect = close_coroutine
    return loop


class MockBot(CustomMockMixin, mock.MagicMock):
    """A mock of our `Bot`, including its coroutine helpers such as `get_member_or_user`."""

    spec_set = Bot()
    additional_spec_asyncs = ("wait_for",)

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.loop = _get_mock_loop()


text_channel_instance = discord.TextChannel(
    state=mock.MagicMock(),
    guild=mock.MagicMock(),
    data={
        "id": 1,
        "type": "TextChannel",
        "name": "channel",
        "parent_id": 1234567890,
        "topic": "topic",
        "position": 1,
        "nsfw": False,
        "last_message_id": 1,
    },
)


class MockTextChannel(CustomMockMixin, mock.Mock, HashableMixin):
    """A `discord.TextChannel` mock, used for the join log, log channels and system channels."""

    spec_set = text_channel_instance
    additional_spec_asyncs = ("send", "edit")

    def __init__(self, **kwargs) -> None:
        default_kwargs = {"id": next(self.discord_id), "name": "channel", "guild": MockGuild()}
        super().__init__(**ChainMap(kwargs, default_kwargs))

        if "mention" not in kwargs:
            self.mention = f"#{self.name}"


class Context(ApplicationContext):
    """An application context that does not consult the interaction about its response state."""

    def __init__(self, bot: Bot, interaction: Interaction):
        super().__init__(bot, interaction)

    def send_response(self):
        return self.interaction.response.send_message


context_instance = Context(bot=MockBot(), interaction=mock.MagicMock())


class MockContext(CustomMockMixin, mock.MagicMock):
    """An `ApplicationContext` mock with awaitable `respond` and `defer`."""

    spec_set = context_instance
    additional_spec_asyncs = ("respond", "defer")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.bot = kwargs.get("bot", MockBot())
        self.guild = kwargs.get("guild", MockGuild())
        self.author = kwargs.get("author", MockMember())
        self.user = kwargs.get("user", self.author)
        self.channel = kwargs.get("channel", MockTextChannel())
        self.respond = mock.AsyncMock()
        self.defer = mock.AsyncMock()
