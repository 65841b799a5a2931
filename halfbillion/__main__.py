from halfbillion.main import app

app(prog_name="halfbillion")
