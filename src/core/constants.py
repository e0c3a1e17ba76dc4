from pydantic import BaseModel


class Colours(BaseModel):
    """Colour codes."""

    bright_green: int = 0x01D277
    failed_ban: int = 0xF00000
    orange: int = 0xE67E22
    ban: int = 0xED4245
    unban: int = 0x57F287
    soft_red: int = 0xCD6D6D


class Emojis(BaseModel):
    """Emoji codes."""

    partying_face: str = "\U0001F973"  # 🥳


class DiscordErrors(BaseModel):
    """JSON error codes returned by the Discord API."""

    unknown_member: int = 10007
    unknown_user: int = 10013


class Constants(BaseModel):
    """The app constants."""

    colours: Colours = Colours()
    emojis: Emojis = Emojis()
    discord_errors: DiscordErrors = DiscordErrors()

    role_management_url: str = "https://support.discord.com/hc/en-us/articles/214836687-Role-Management-101"
    modlog_page_size: int = 25
    embed_description_limit: int = 4096


constants = Constants()
