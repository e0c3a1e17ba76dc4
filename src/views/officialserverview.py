import logging

import discord
from discord import Embed, Guild, Interaction
from discord.ui import Button, View

from src.core import constants
from src.helpers.servers import mark_official

logger = logging.getLogger(__name__)


def join_notice(guild: Guild, owner_name: str) -> Embed:
    """The join-log notice asking whether global bans should be enforced in a guild."""
    embed = Embed(
        title="Joined a new server",
        description=f"I joined a new server: {guild.name} ({guild.id}) | Owned by {owner_name}. "
                    f"Would you like to enforce gbans there and be alerted if there are issues?",
        colour=constants.colours.orange,
    )
    embed.set_footer(text=str(guild.id))
    return embed


def notice_guild_id(interaction: Interaction) -> int | None:
    """Read the guild id back from the footer of a join notice."""
    if not interaction.message or not interaction.message.embeds:
        return None
    footer = interaction.message.embeds[0].footer.text
    return int(footer) if footer and footer.isdigit() else None


class OfficialServerView(View):
    """Persistent Yes / No buttons attached to every join notice."""

    def __init__(self):
        super().__init__(timeout=None)

    async def disable_all_buttons(self) -> None:
        """Disable all buttons in the view."""
        for item in self.children:
            if isinstance(item, Button):
                item.disabled = True

    @discord.ui.button(label="Yes", style=discord.ButtonStyle.success, custom_id="gban_official_confirm")
    async def confirm_button(self, button: Button, interaction: Interaction) -> None:
        """Mark the guild official so global bans are always enforced there."""
        guild_id = notice_guild_id(interaction)
        if guild_id is None:
            await interaction.response.send_message("I could not tell which server this notice is for.", ephemeral=True)
            return

        await mark_official(guild_id)
        logger.info(f"{interaction.user} marked server {guild_id} official from the join notice.")
        await self.disable_all_buttons()
        await interaction.response.edit_message(
            content=f"{interaction.user.display_name} chose to enforce gbans in server {guild_id}.", view=self
        )

    @discord.ui.button(label="No", style=discord.ButtonStyle.secondary, custom_id="gban_official_deny")
    async def deny_button(self, button: Button, interaction: Interaction) -> None:
        """Leave the guild's class as it is."""
        guild_id = notice_guild_id(interaction)
        await self.disable_all_buttons()
        await interaction.response.edit_message(
            content=f"{interaction.user.display_name} chose not to enforce gbans in server {guild_id}.", view=self
        )
