"""
Запуск бота и API вместе.
Для VPS лучше два отдельных systemd-юнита.
"""

import os
import subprocess
import sys


def main():
    port = os.getenv("API_PORT", "8000")

    # Запускаем API в отдельном процессе
    api_process = subprocess.Popen([
        sys.executable, "-m", "uvicorn",
        "api.main:app",
        "--host", "0.0.0.0",
        "--port", port,
    ])

    # Запускаем бота
    bot_process = subprocess.Popen([sys.executable, "bot.py"])

    try:
        api_process.wait()
        bot_process.wait()
    except KeyboardInterrupt:
        api_process.terminate()
        bot_process.terminate()


if __name__ == "__main__":
    main()
