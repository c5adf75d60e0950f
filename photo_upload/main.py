"""Точка входа в приложение."""
import logging

from photo_upload.app import PhotoUploadApp


def main() -> None:
    """Создаёт и запускает главное окно приложения."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = PhotoUploadApp()
    app.mainloop()


if __name__ == "__main__":
    main()
