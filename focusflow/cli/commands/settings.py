"""Settings commands."""

import sys

import click

from ..helpers import echo_storage_warning, get_controller


@click.group()
def settings():
    """View and change settings"""
    pass


@settings.command()
@click.pass_context
def show(ctx):
    """Show current settings"""
    controller = get_controller(ctx)
    current = controller.state.settings

    click.echo(f"confirm-before-delete: {current.confirm_before_delete}")
    click.echo(f"sounds:                {current.enable_sounds}")
    click.echo(f"onboarding:            {current.show_onboarding}")
    click.echo(f"default-project:       {current.default_project_id or '-'}")


@settings.command(name='set')
@click.option('--confirm-before-delete/--no-confirm-before-delete', default=None,
              help='Ask before deleting tasks')
@click.option('--sounds/--no-sounds', default=None, help='Play sounds on completion')
@click.option('--onboarding/--no-onboarding', default=None, help='Show onboarding tips')
@click.option('--default-project', help='Project for new tasks ("none" to clear)')
@click.pass_context
def set_settings(ctx, confirm_before_delete, sounds, onboarding, default_project):
    """Change settings"""
    controller = get_controller(ctx)

    patch = {}
    if confirm_before_delete is not None:
        patch['confirm_before_delete'] = confirm_before_delete
    if sounds is not None:
        patch['enable_sounds'] = sounds
    if onboarding is not None:
        patch['show_onboarding'] = onboarding
    if default_project is not None:
        if default_project.lower() == 'none':
            patch['default_project_id'] = None
        elif controller.state.find_project(default_project) is None:
            click.echo(f"Error: No project found with ID: {default_project}", err=True)
            sys.exit(1)
        else:
            patch['default_project_id'] = default_project

    if not patch:
        click.echo("Nothing to change.")
        return

    controller.update_settings(patch)
    echo_storage_warning(controller)
    click.echo("✅ Settings updated")
