from check_gate.cli.main import app

app(prog_name="check-gate")
