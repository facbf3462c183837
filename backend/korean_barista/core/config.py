import os

class Settings:
    APP_NAME: str = "Korean Typing Barista API"
    # "assets" is a sibling to "core", "services" etc. inside the package
    BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    ASSETS_DIR = os.path.join(BASE_DIR, "assets")
    SENTENCES_PATH: str = os.path.join(ASSETS_DIR, "sentences.json")

    DATA_DIR = os.getenv("BARISTA_DATA_DIR", os.path.join(BASE_DIR, "data"))

    # The whole learner document lives under this single key / file name
    STORAGE_KEY: str = "user-storage"
    STORE_PATH: str = os.getenv("BARISTA_STORE_PATH", os.path.join(DATA_DIR, f"{STORAGE_KEY}.json"))

    # Origins allowed to call the API (the Streamlit frontend runs on another port)
    CORS_ORIGINS: list = os.getenv("BARISTA_CORS_ORIGINS", "*").split(",")

    LOG_LEVEL: str = os.getenv("BARISTA_LOG_LEVEL", "INFO")

    # TTS settings
    TTS_LANG: str = "ko"

settings = Settings()
