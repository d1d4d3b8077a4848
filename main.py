from postwall.main import create_app

app = create_app()

# запуск:
# uvicorn main:app --reload --host 0.0.0.0 --port 4000
# STORE_BACKEND=redis REDIS_URL=redis://localhost:6379/0 uvicorn main:app
