import os, sys, tempfile, json
from fastapi.testclient import TestClient
from jobboard_currency.main import create_app
from jobboard_currency.core.config import Settings

"""Smoke test for the currency API against live providers.

Starts the app (detection + rate loading on startup), then prints the state,
a salary-style conversion and the result of a forced refresh. With no network
the output shows the fallbacks: default currency and identity rates.
"""


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=d, debug=False)
        settings.init_post_load()
        app = create_app(settings_override=settings)
        with TestClient(app) as client:
            state = client.get("/currency").json()
            converted = client.get(
                "/currency/convert",
                params={"amount": 55000, "from_currency": "GBP"},
            ).json()
            refreshed = client.post("/currency/refresh").json()

        print(
            json.dumps(
                {
                    "selected": state["selected_currency"],
                    "detected": state["detected_currency"],
                    "error": state["error"],
                    "convert_55000_gbp": converted,
                    "refresh_error": refreshed["error"],
                },
                indent=2,
                ensure_ascii=False,
            )
        )


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
