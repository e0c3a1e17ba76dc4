from unittest.mock import AsyncMock, patch

import pytest

from src.cmds.core import sync
from src.helpers.commands import GbanCommand
from src.helpers.responses import SimpleResponse


class TestSyncCog:
    """Test the `Sync` cog."""

    @pytest.mark.asyncio
    async def test_syncgban(self, ctx, bot):
        with patch("src.cmds.core.sync.dispatch", new_callable=AsyncMock) as dispatch_mock:
            dispatch_mock.return_value = SimpleResponse(message="gbans synced. 1 new bans were found.")

            cog = sync.SyncCog(bot)
            await cog.syncgban.callback(cog, ctx)

            dispatch_mock.assert_awaited_once_with(GbanCommand.SYNCGBAN, bot, guild=ctx.guild)
            ctx.respond.assert_called_once_with("gbans synced. 1 new bans were found.", ephemeral=False)

    @pytest.mark.asyncio
    async def test_syncdb_gban(self, ctx, bot):
        with patch("src.cmds.core.sync.dispatch", new_callable=AsyncMock) as dispatch_mock:
            dispatch_mock.return_value = SimpleResponse(message="Unbanned statuses updated for list of gbans")

            cog = sync.SyncCog(bot)
            await cog.syncdb.callback(cog, ctx, "gban")

            dispatch_mock.assert_awaited_once_with(GbanCommand.SYNCDB_GBAN, bot)

    @pytest.mark.asyncio
    async def test_syncdb_unknown_scope(self, ctx, bot):
        with patch("src.cmds.core.sync.dispatch", new_callable=AsyncMock) as dispatch_mock:
            cog = sync.SyncCog(bot)
            await cog.syncdb.callback(cog, ctx, "cc")

            dispatch_mock.assert_not_awaited()
            ctx.respond.assert_called_once_with("Unknown scope 'cc'.", ephemeral=True)

    @pytest.mark.asyncio
    async def test_popgban(self, ctx, bot):
        with patch("src.cmds.core.sync.dispatch", new_callable=AsyncMock) as dispatch_mock:
            dispatch_mock.return_value = SimpleResponse(message="Gban database populated with 2 entries.", ephemeral=True)

            cog = sync.SyncCog(bot)
            await cog.popgban.callback(cog, ctx)

            dispatch_mock.assert_awaited_once_with(GbanCommand.POPGBAN, bot)
            ctx.respond.assert_called_once_with("Gban database populated with 2 entries.", ephemeral=True)

    def test_setup(self, bot):
        """Test the setup method of the cog."""
        sync.setup(bot)

        bot.add_cog.assert_called_once()
