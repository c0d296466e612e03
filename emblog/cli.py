import click

from .extensions import db
from .models.user import ROLE_ADMIN, User


def register_commands(app):
    @app.cli.command('seed-admin')
    def seed_admin():
        """Create the admin account from ADMIN_EMAIL / ADMIN_PASSWORD if missing."""
        email = app.config['ADMIN_EMAIL'].strip().lower()
        if User.query.filter_by(email=email).first():
            click.echo('Admin user already exists')
            return

        admin = User(
            name=app.config['ADMIN_NAME'],
            email=email,
            role=ROLE_ADMIN,
            bio='EM Blogs Platform Administrator',
        )
        admin.set_password(app.config['ADMIN_PASSWORD'])
        db.session.add(admin)
        db.session.commit()
        app.logger.info('Seeded admin user %s', admin.id)
        click.echo(f'Admin user created: {email}')
