from hail_sync.cli.cli import app

app()
