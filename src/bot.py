import logging

import discord
from discord import (
    ApplicationContext, Cog, DiscordException, Embed, HTTPException, Forbidden, NotFound, Member,
    User, Guild, TextChannel
)
from discord.ext.commands import (
    Bot as DiscordBot, CommandNotFound, CommandOnCooldown, DefaultHelpCommand,
    MissingAnyRole, MissingPermissions, MissingRequiredArgument, NoPrivateMessage, UserInputError
)
from sqlalchemy.exc import NoResultFound, SQLAlchemyError

from src.core import constants, settings
from src.helpers.errors import GbanError
from src.helpers.servers import register_server, remove_server
from src.metrics import completed_commands, errored_commands, received_commands
from src.views.officialserverview import OfficialServerView, join_notice

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    f"Hey! Thanks for adding {settings.bot.NAME} to your server!\n\n"
    "One of my capabilities is the automatic removal of globally banned users, triggered by a command only the "
    "global ban staff can run.\n\n"
    "**Global bans are disabled by default in your server.** If you'd like to turn them on, please run the "
    "`/opt in` command within your server. If you'd like to remain opted out, no further action is required."
)


class Bot(DiscordBot):
    """Base bot class."""

    name = settings.bot.NAME
    logger = logger

    async def on_ready(self) -> None:
        """Triggered when the bot is ready."""
        name = f"{self.user} (ID: {self.user.id})"

        devlog_msg = f"Connected {constants.emojis.partying_face}"
        self.loop.create_task(self.send_log(devlog_msg, colour=constants.colours.bright_green))

        logger.info(f"Started bot as {name}")
        self.add_view(OfficialServerView())

    async def on_guild_join(self, guild: Guild) -> None:
        """Register the guild and ask the staff whether global bans should be enforced there."""
        await register_server(guild.id)

        owner = await self.get_member_or_user(guild, guild.owner_id)
        owner_name = f"{owner.name} ({owner.id})" if owner else str(guild.owner_id)

        join_log = self.get_channel(settings.channels.JOIN_LOG)
        if isinstance(join_log, TextChannel):
            await join_log.send(embed=join_notice(guild, owner_name), view=OfficialServerView())
        else:
            logger.warning(
                f"Could not find the join log channel (ID: {settings.channels.JOIN_LOG}). "
                f"I recently joined server {guild.name} ({guild.id})"
            )

        await self.send_welcome(guild, owner)

    async def on_guild_remove(self, guild: Guild) -> None:
        """Forget a guild the bot was removed from."""
        await remove_server(guild.id)
        logger.info(f"Left server {guild.name} ({guild.id})")

    async def send_welcome(self, guild: Guild, owner: Member | User | None) -> None:
        """DM the welcome message to the owner, falling back to the system channel."""
        if owner:
            try:
                await owner.send(WELCOME_MESSAGE)
                return
            except HTTPException as exc:
                logger.debug(f"Could not DM the owner of {guild.name} ({guild.id})", exc_info=exc)

        channel = guild.system_channel
        if channel and channel.permissions_for(guild.me).send_messages:
            try:
                await channel.send(WELCOME_MESSAGE)
            except HTTPException as exc:
                logger.debug(f"Could not post the welcome message in {guild.name} ({guild.id})", exc_info=exc)

    async def on_application_command(self, ctx: ApplicationContext) -> None:
        """A global handler cog."""
        logger.debug(f"Command '{ctx.command}' received.")
        received_commands.labels(ctx.command.name).inc()

    async def on_application_command_error(self, ctx: ApplicationContext, error: DiscordException) -> None:
        """A global error handler cog."""
        message = None
        original = getattr(error, "original", error)
        if isinstance(error, CommandNotFound):
            return
        if isinstance(error, MissingRequiredArgument):
            message = f"Parameter '{error.param.name}' is required, but missing."
        elif isinstance(error, MissingPermissions):
            message = "You are missing the required permissions to run this command."
        elif isinstance(error, MissingAnyRole):
            message = "You are not authorized to use that command."
        elif isinstance(error, UserInputError):
            message = "Something about your input was wrong, please check your input and try again."
        elif isinstance(error, NoPrivateMessage):
            message = "This command cannot be run in a DM."
        elif isinstance(error, CommandOnCooldown):
            message = f"You are on cooldown. Try again in {error.retry_after:.2f}s"
        elif isinstance(original, GbanError):
            message = original.message
        elif isinstance(original, NoResultFound):
            message = "The requested object could not be found."
        elif isinstance(original, SQLAlchemyError):
            logger.error("Database error while running a command.", exc_info=original)
            message = "I could not reach the database, the operation may only be partially complete."

        errored_commands.labels(ctx.command.name).inc()

        if message is None:
            raise error
        else:
            logger.debug(f"A user caused an error which was handled.", exc_info=error)
            await ctx.respond(message, delete_after=15, ephemeral=True)

    async def on_application_command_completion(self, ctx: ApplicationContext) -> None:
        """A global cog handler."""
        logger.debug(f"Command '{ctx.command}' completed.")
        completed_commands.labels(ctx.command.name).inc()

    async def on_error(self, event: any, *args, **kwargs) -> None:
        """Don't ignore the error, causing Sentry to capture it."""
        raise

    def add_cog(self, cog: Cog, *, override: bool = False) -> None:
        """Log whenever a cog is loaded."""
        super().add_cog(cog, override=override)
        logger.debug(f"Cog loaded: {cog.qualified_name}")

    async def send_log(self, description: str = None, colour: int = None, embed: Embed = None) -> None:
        """Send an embed message to the devlog channel."""
        devlog = self.get_channel(settings.channels.DEVLOG)

        if not devlog:
            logger.debug(
                f"Fetching the devlog channel as it wasn't found in the cache "
                f"(ID: {settings.channels.DEVLOG})"
            )
            try:
                devlog = await self.fetch_channel(settings.channels.DEVLOG)
            except HTTPException:
                logger.debug(
                    f"Could not fetch the devlog channel so log message won't be sent "
                    f"(ID: {settings.channels.DEVLOG})"
                )
                return

        if not embed:
            embed = Embed(description=description)

        if colour:
            embed.colour = colour

        await devlog.send(embed=embed)

    async def get_member_or_user(self, guild: Guild, id_: int) -> Member | User | None:
        """Get a member or a user from the guild or discord."""
        try:
            return await guild.fetch_member(id_)
        except Forbidden as exc:
            logger.warning(f"Unauthorized attempt to fetch member with id: {id_}", exc_info=exc)
        except (NotFound, HTTPException) as exc:
            logger.error(f"Discord error while fetching guild member with id: {id_}", exc_info=exc)
            try:
                return await self.get_or_fetch_user(id_)
            except Forbidden as exc:
                logger.warning(f"Unauthorized attempt to fetch member with id: {id_}", exc_info=exc)
            except NotFound as exc:
                logger.warning(f"Could not find guild member with id: {id_}", exc_info=exc)
            except HTTPException as exc:
                logger.error(f"Discord error while fetching guild member with id: {id_}", exc_info=exc)

        return None


# Initiate the bot.
intents = discord.Intents.all()
help_command = DefaultHelpCommand(no_category="Available Commands")
bot = Bot(help_command=help_command, intents=intents)
