from app.settings import Settings

settings = Settings()
