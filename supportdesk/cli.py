"""Flask CLI commands for admin operations."""
import os
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and the upload directory."""
        from supportdesk.extensions import db, get_storage

        db.create_all()
        get_storage().init()
        click.echo(
            f"Database initialized. Uploads go to {current_app.config['UPLOAD_FOLDER']}"
        )

    @app.cli.command("stats")
    def stats():
        """Show row counts."""
        from supportdesk.services.support_service import get_stats

        for name, count in get_stats().items():
            click.echo(f"  {name}: {count}")

    @app.cli.command("orphans")
    @click.option("--delete", is_flag=True, help="Remove the orphaned files.")
    def orphans(delete):
        """List uploaded files that no image record points at."""
        from supportdesk.extensions import db, get_storage
        from supportdesk.services.upload_service import find_orphans

        storage = get_storage()
        names = find_orphans(storage, db.session)
        if not names:
            click.echo("No orphaned files.")
            return
        for name in names:
            path = storage.path_for(name)
            if delete:
                removed = storage.delete(path)
                click.echo(f"{'deleted' if removed else 'FAILED'}: {name}")
            else:
                click.echo(name)
        click.echo(f"{len(names)} orphaned file(s).")

    @app.cli.command("compress-image")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--max-width", default=1920, show_default=True, type=int)
    @click.option("--max-height", default=1080, show_default=True, type=int)
    @click.option("--quality", default=0.85, show_default=True, type=float)
    @click.option("--output", "-o", type=click.Path(dir_okay=False), default=None)
    def compress(path, max_width, max_height, quality, output):
        """Compress an image the way uploads are compressed."""
        import mimetypes
        from supportdesk.services.image_service import compress_image

        mime_type, _ = mimetypes.guess_type(path)
        data = compress_image(path, max_width, max_height, quality, mime_type=mime_type)
        if output is None:
            root, ext = os.path.splitext(path)
            output = f"{root}.compressed{ext}"
        with open(output, "wb") as fh:
            fh.write(data)
        click.echo(f"{path}: {os.path.getsize(path)} -> {len(data)} bytes ({output})")
