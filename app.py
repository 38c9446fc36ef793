"""
UltraHonk 검증 서비스 (Flask)
==============================

검증기 등록, 생성 코드 조회, 증명 제출 기록을 제공한다 (honk_routes.py).

설정 (환경변수, HONK_ 접두사):
  HONK_DB_PATH        TinyDB 파일 경로 (기본 db.json)
  HONK_CURVE_BACKEND  곡선 백엔드 이름 (bn128 | optimized_bn128)

실행:
    $ HONK_CURVE_BACKEND=optimized_bn128 python app.py
"""

import logging

from flask import Flask

from tinydb import TinyDB

from honk_routes import honk_bp, init_honk_bp

DEFAULT_CONFIG = {
    "DB_PATH": "db.json",
    "CURVE_BACKEND": None,
}


def create_app(config=None, db=None):
    """Flask 앱을 만든다.

    Args:
        config: 추가 설정 dict (환경변수보다 우선)
        db: 주입할 TinyDB (None이면 DB_PATH의 파일 DB)
    """
    app = Flask(__name__)
    app.config.update(DEFAULT_CONFIG)
    app.config.from_prefixed_env("HONK")
    if config:
        app.config.update(config)

    if db is None:
        db = TinyDB(app.config["DB_PATH"])              #Storage DB
    init_honk_bp(db)
    app.register_blueprint(honk_bp)
    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_app().run()
