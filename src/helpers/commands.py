"""
Global ban command registry.

Every chat command maps to one `GbanCommand` and one handler. Handlers only talk to the helper modules and return a
`SimpleResponse`, the cogs take care of the chat side.
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable

from discord import Guild
from discord.ext.commands import Bot

from src.helpers.errors import GbanError
from src.helpers.gban import PropagationReport, check_bannable, propagate_ban, propagate_group_ban
from src.helpers.gunban import resolve_global_unban
from src.helpers.reconcile import detect_unbanned, enforce_guild, import_from_modlog, reference_guild
from src.helpers.responses import SimpleResponse
from src.helpers.servers import find_guilds, mark_official, opt_in, opt_out, unmark_official

logger = logging.getLogger(__name__)


class GbanCommand(str, Enum):
    GBAN_USER = "gban user"
    GBAN_GROUP = "gban group"
    GBAN_ENFORCE = "gban enforce"
    GBAN_UNENFORCE = "gban unenforce"
    GUNBAN = "gunban"
    CHECKGBAN = "checkgban"
    SYNCGBAN = "syncgban"
    SYNCDB_GBAN = "syncdb gban"
    POPGBAN = "popgban"
    OPT_IN = "opt in"
    OPT_OUT = "opt out"


Handler = Callable[..., Awaitable[SimpleResponse]]
HANDLERS: dict[GbanCommand, Handler] = {}


def register(command: GbanCommand) -> Callable[[Handler], Handler]:
    """Register the decorated coroutine as the handler of a command."""

    def decorator(func: Handler) -> Handler:
        if command in HANDLERS:
            raise ValueError(f"A handler for '{command.value}' is already registered.")
        HANDLERS[command] = func
        return func

    return decorator


async def dispatch(command: GbanCommand, bot: Bot, **kwargs) -> SimpleResponse:
    """Run the handler of a command. Global ban errors become an ephemeral reply."""
    handler = HANDLERS[command]
    try:
        return await handler(bot, **kwargs)
    except GbanError as exc:
        logger.info(f"Command '{command.value}' refused: {exc.message}")
        return SimpleResponse(message=exc.message, ephemeral=True, code=type(exc).__name__)


def propagation_message(report: PropagationReport) -> str:
    if report.aborted:
        return report.aborted
    if report.failed:
        failed = "\n".join(report.failed)
        return f"I was unable to ban in:\n\n{failed}"
    if len(report.targets) > 1:
        return f"I have banned {len(report.targets)} users from every server of interest."
    return "I have banned the user from every server of interest."


def _single_guild(guilds: Iterable[Guild], query: str) -> Guild | SimpleResponse:
    found = find_guilds(guilds, query)
    if not found:
        return SimpleResponse(message="No guilds found by that info, returning", ephemeral=True)
    if len(found) > 1:
        listing = "\n".join(f"{guild.name} ({guild.id})" for guild in found)
        return SimpleResponse(
            message="More than one guild found by that name. "
                    f"Please provide the id of the server or choose one from the list:\n{listing}",
            ephemeral=True,
        )
    return found[0]


@register(GbanCommand.GBAN_USER)
async def gban_user(bot: Bot, target: int, reason: str | None = None) -> SimpleResponse:
    report = await propagate_ban(bot, target, reason)
    return SimpleResponse(message=propagation_message(report))


@register(GbanCommand.GBAN_GROUP)
async def gban_group(bot: Bot, ids: str, reason: str | None = None) -> SimpleResponse:
    report = await propagate_group_ban(bot, ids, reason)
    return SimpleResponse(message=propagation_message(report))


@register(GbanCommand.GBAN_ENFORCE)
async def gban_enforce(bot: Bot, query: str) -> SimpleResponse:
    guild = _single_guild(bot.guilds, query)
    if isinstance(guild, SimpleResponse):
        return guild
    await mark_official(guild.id)
    return SimpleResponse(message=f"I will enforce gbans in {guild.name}. I'll let you know if I have problems")


@register(GbanCommand.GBAN_UNENFORCE)
async def gban_unenforce(bot: Bot, query: str) -> SimpleResponse:
    guild = _single_guild(bot.guilds, query)
    if isinstance(guild, SimpleResponse):
        return guild
    await unmark_official(guild.id)
    return SimpleResponse(
        message=f"Ok, I won't enforce gbans in {guild.name} unless they opt in. "
                "This server is no longer considered official."
    )


@register(GbanCommand.GUNBAN)
async def gunban(bot: Bot, target: int, name: str | None = None, reason: str | None = None) -> SimpleResponse:
    report = await resolve_global_unban(bot, target, reason)
    message = f"I attempted to unban {name or target} from every server I gbanned them from."
    if report.failed:
        message += "\n\nI was unable to unban in:\n" + "\n".join(report.failed)
    return SimpleResponse(message=message)


@register(GbanCommand.CHECKGBAN)
async def checkgban(bot: Bot, target: int, name: str | None = None) -> SimpleResponse:
    unbannable = await check_bannable(bot, target)
    if unbannable:
        return SimpleResponse(
            message=f"{name or target} cannot be banned from the following guilds:\n{', '.join(unbannable)}"
        )
    return SimpleResponse(message=f"{name or target} is bannable in every guild")


@register(GbanCommand.SYNCGBAN)
async def syncgban(bot: Bot, guild: Guild) -> SimpleResponse:
    report = await enforce_guild(guild)
    return SimpleResponse(message=report.message)


@register(GbanCommand.SYNCDB_GBAN)
async def syncdb_gban(bot: Bot) -> SimpleResponse:
    drift = await detect_unbanned(reference_guild(bot))
    return SimpleResponse(message=f"Unbanned statuses updated for list of gbans ({len(drift)} changed).")


@register(GbanCommand.POPGBAN)
async def popgban(bot: Bot) -> SimpleResponse:
    count = await import_from_modlog(bot, reference_guild(bot))
    if not count:
        return SimpleResponse(message="No global bans to import.", ephemeral=True)
    return SimpleResponse(message=f"Gban database populated with {count} entries.", ephemeral=True)


@register(GbanCommand.OPT_IN)
async def opt_in_command(bot: Bot, guild: Guild) -> SimpleResponse:
    await opt_in(guild.id)
    return SimpleResponse(
        message="Ok, I will ban users here as well. You can update your preferences at any time with the opt in/out "
                "command.\n\nIt is recommended to set up a logging channel with `/logging set` if you haven't "
                "already so you can be alerted if there are any issues."
    )


@register(GbanCommand.OPT_OUT)
async def opt_out_command(bot: Bot, guild: Guild) -> SimpleResponse:
    await opt_out(guild.id)
    return SimpleResponse(
        message="Ok, I will not try to globally ban users from here. "
                "You can update your preferences at any time with the opt in/out command."
    )
