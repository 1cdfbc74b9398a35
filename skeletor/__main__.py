from skeletor.cli import app

app(prog_name="skeletor")
