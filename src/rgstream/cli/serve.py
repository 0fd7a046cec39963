"""Serve command: run the rgstream web API"""

import click


@click.command()
@click.option('--host', default='127.0.0.1', show_default=True, help="Host to bind")
@click.option('--port', default=8000, type=int, show_default=True, help="Port to bind")
def serve_command(host, port):
    """Start the rgstream web API server."""
    import uvicorn

    click.echo(f"Starting rgstream server on http://{host}:{port}")
    uvicorn.run('rgstream.web:app', host=host, port=port)
