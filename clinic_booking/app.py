"""Entry point for ``flask --app clinic_booking.app`` and WSGI servers."""

from clinic_booking import APP_HOST, APP_PORT, create_app

application = app = create_app()

if __name__ == "__main__":
    application.run(host=APP_HOST, port=APP_PORT)
