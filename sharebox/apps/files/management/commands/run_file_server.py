"""Django management command to run the file server."""

import logging
from typing import Any, Final, final, override

from cheroot.wsgi import Server as WSGIServer
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.core.wsgi import get_wsgi_application

logger = logging.getLogger(__name__)

SERVER_NAME: Final = 'Sharebox'


def build_server(host: str, port: int, threads: int) -> WSGIServer:
    """Create a cheroot thread-pool server for the Django application.

    Args:
        host: Address to bind to.
        port: Port to bind to.
        threads: Number of worker threads; each request holds one.

    Returns:
        Configured server, not yet started.
    """
    server = WSGIServer(
        bind_addr=(host, port),
        wsgi_app=get_wsgi_application(),
        numthreads=threads,
    )
    server.server_name = SERVER_NAME
    return server


def serve(host: str, port: int, threads: int) -> None:
    """Serve requests until the process is interrupted.

    The reloader runs this in a fresh worker process, so it only takes
    plain values.
    """
    server = build_server(host, port, threads)
    logger.info(
        'File server listening on %s:%d with %d threads',
        host,
        port,
        threads,
    )
    try:
        server.start()
    except KeyboardInterrupt:
        logger.info('File server interrupted')
    finally:
        server.stop()
        logger.info('File server stopped')


@final
class Command(BaseCommand):
    """Run the file server, optionally restarting it on code changes."""

    help = 'Run the sharebox file server'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--host',
            type=str,
            default=None,
            help='Host to bind to (default: SHAREBOX_HOST)',
        )
        parser.add_argument(
            '--port',
            type=int,
            default=None,
            help='Port to bind to (default: SHAREBOX_PORT)',
        )
        parser.add_argument(
            '--threads',
            type=int,
            default=None,
            help='Worker threads (default: SHAREBOX_THREADS)',
        )
        parser.add_argument(
            '--reload',
            action='store_true',
            default=False,
            help='Restart the server when Python sources change',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments.
            options: Keyword arguments from command line.
        """
        host = options['host'] or settings.SHAREBOX_HOST
        port = options['port'] or settings.SHAREBOX_PORT
        threads = options['threads'] or settings.SHAREBOX_THREADS

        if options['reload']:
            self._serve_with_reload(host, port, threads)
            return

        self.stdout.write(
            self.style.SUCCESS(
                f'Starting file server on {host}:{port} ({threads} threads)',
            ),
        )
        serve(host, port, threads)
        self.stdout.write(self.style.SUCCESS('File server stopped'))

    def _serve_with_reload(self, host: str, port: int, threads: int) -> None:
        try:
            import watchfiles  # noqa: PLC0415
        except ImportError as exc:
            raise CommandError(
                '--reload requires watchfiles: poetry install --extras dev',
            ) from exc

        source_dir = str(settings.BASE_DIR / 'sharebox')
        self.stdout.write(
            self.style.SUCCESS(
                f'Serving on {host}:{port}, watching {source_dir}',
            ),
        )

        watchfiles.run_process(
            source_dir,
            target=serve,
            args=(host, port, threads),
            watch_filter=watchfiles.PythonFilter(),
            callback=self._report_changes,
        )

    def _report_changes(self, changes: set[tuple[Any, str]]) -> None:
        changed = sorted(path for _change, path in changes)
        self.stdout.write(
            self.style.WARNING(
                f'Restarting after {len(changed)} change(s): {", ".join(changed)}',
            ),
        )
