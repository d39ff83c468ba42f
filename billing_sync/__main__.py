from billing_sync.cli import app

app()
