from iam_api.cli import app

app(prog_name="iam-api")
