"""CLI error handling helpers."""

import logging

import click

from cashbook.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


class BoundaryGroup(click.Group):
    """Click group that turns uncaught failures into a generic error.

    Domain errors keep their message; anything else is logged with its
    traceback and shown to the user only as an internal error.
    """

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except (click.exceptions.Exit, click.exceptions.Abort, click.ClickException):
            raise
        except DomainError as e:
            handle_domain_error(ctx, e)
        except Exception:
            logger.exception("Unhandled error in command %s", ctx.invoked_subcommand)
            click.echo("Error: internal error", err=True)
            ctx.exit(1)
