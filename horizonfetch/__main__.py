from horizonfetch.main import app

app()
