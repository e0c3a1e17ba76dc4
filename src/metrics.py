from prometheus_client import Counter

received_commands = Counter('commands_received', 'Count number of commands received.', ['command', ])
completed_commands = Counter('commands_completed', 'Count number of commands completed.', ['command', ])
errored_commands = Counter('commands_errored', 'Count number of commands errored.', ['command', ])

guild_action_failures = Counter(
    'gban_guild_action_failures', 'Count number of failed per-guild global ban actions.', ['action', ]
)
ledger_writes = Counter('gban_ledger_writes', 'Count number of ledger rows written.', ['operation', ])
