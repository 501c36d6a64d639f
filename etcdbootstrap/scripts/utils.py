import click


class NaturalOrderGroup(click.Group):
    """Lists the subcommands in the order they are declared."""

    def list_commands(self, ctx):
        return list(self.commands)


def check_required_option(value, option_name):
    """Fail with a usage error when a conditionally required option is empty."""
    if value is None or not str(value).strip():
        raise click.UsageError("{} must be provided.".format(option_name))
