"""Click CLI entry point with lazy-loaded subcommands."""

import os
import sys

# Fix Unicode output on Windows consoles (cp1253, cp1252, etc.)
if sys.platform == "win32" and not os.environ.get("PYTHONIOENCODING"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click


# Lazy-loading command group: imports command modules only when invoked.
# This keeps tree-sitter grammars out of `--help` and `profiles`.
_COMMANDS = {
    "dead-code":        ("langtools.commands.cmd_dead_code",        "dead_code"),
    "public-dead-code": ("langtools.commands.cmd_public_dead_code", "public_dead_code"),
    "clean-imports":    ("langtools.commands.cmd_clean_imports",    "clean_imports"),
    "profiles":         ("langtools.commands.cmd_profiles",         "profiles"),
    "mcp":              ("langtools.mcp_server",                    "mcp_cmd"),
}

_CATEGORIES = {
    "Analysis": ["dead-code", "public-dead-code"],
    "Cleanup": ["clean-imports"],
    "Configuration": ["profiles"],
    "Integration": ["mcp"],
}


class LazyGroup(click.Group):
    """A Click group that lazy-loads command modules on first access."""

    def list_commands(self, ctx):
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx, cmd_name):
        if cmd_name not in _COMMANDS:
            return None
        module_path, attr_name = _COMMANDS[cmd_name]
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, attr_name)

    def format_help(self, ctx, formatter):
        """Categorized help display instead of flat alphabetical list."""
        self.format_usage(ctx, formatter)
        formatter.write("\n")
        if self.help:
            formatter.write(self.help + "\n\n")
        self.format_options(ctx, formatter)
        formatter.write("\n")

        for cat_name, cmds in _CATEGORIES.items():
            formatter.write(f"  {cat_name}:\n")
            for cmd_name in cmds:
                cmd = self.get_command(ctx, cmd_name)
                help_text = cmd.get_short_help_str(limit=60) if cmd else ""
                formatter.write(f"    {cmd_name:20s} {help_text}\n")
            formatter.write("\n")

        formatter.write("  Run `lang-tools <command> --help` for details on any command.\n")


@click.group(cls=LazyGroup)
@click.version_option(package_name="lang-tools")
@click.option('--json', 'json_mode', is_flag=True, help='Output in JSON format')
@click.option(
    '--config', 'config_path', default=None, type=click.Path(dir_okay=False),
    help='Config file (default: $LANG_TOOLS_CONFIG, then ~/.config/lang-tools/config.json)',
)
@click.pass_context
def cli(ctx, json_mode, config_path):
    """lang-tools: dead-code detection and import cleanup for Java and Kotlin."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = json_mode
    ctx.obj['config_path'] = config_path
