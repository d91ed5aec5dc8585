from . import create_app

# uvicorn siteprobe.main:app
app = create_app()
