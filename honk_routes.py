"""
UltraHonk Flask Blueprint — 검증기 등록과 증명 제출
====================================================

  POST /honk/verifiers                      VK 등록 (hex)
  GET  /honk/verifiers/<id>                 등록된 VK 요약
  GET  /honk/verifiers/<id>/source          생성 코드 (?target=python|json)
  POST /honk/submissions                    증명 검증 + 기록
  GET  /honk/submissions                    제출 기록 목록
  GET  /honk/submissions/<id>               제출 기록 하나

제출 기록은 검증 결과의 장부일 뿐이며 검증 상태에 영향을 주지 않는다.
"""

import logging
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request, Response
from tinydb import Query

from ultrahonk.codegen import TARGETS, generate
from ultrahonk.errors import (
    MalformedVK, UnsupportedCircuitShape, VerifierError,
)
from ultrahonk.verifier import HonkVerifier
from ultrahonk.vk import parse_vk

from honk_serializers import (
    decode_hex, decode_words,
    serialize_g2, deserialize_g2, parse_g2_field,
    serialize_vk, deserialize_vk, vk_header,
    proof_hash, serialize_submission,
)

logger = logging.getLogger(__name__)

honk_bp = Blueprint('honk', __name__, url_prefix='/honk')

DATA = Query()

# DB는 app.py에서 주입
DB = None


def init_honk_bp(db):
    """app.py에서 DB를 주입받는다."""
    global DB
    DB = db


# ─── DB 헬퍼 ───

def verifiers_table():
    return DB.table("verifiers")


def submissions_table():
    return DB.table("submissions")


def db_get_verifier(verifier_id):
    """등록된 검증기 문서를 조회한다 (없으면 None)."""
    return verifiers_table().get(doc_id=verifier_id)


def error_response(status, kind, message):
    return jsonify({"error": kind, "message": message}), status


# ──────────────────────────────────────────────────────────────
# 검증기 등록
# ──────────────────────────────────────────────────────────────

@honk_bp.route("/verifiers", methods=["POST"])
def register_verifier():
    """VK를 등록한다.

    본문: {"vk": hex, "name": str?, "srs_g2": "x0,x1,y0,y1"?, "relation_set": str?}
    """
    body = request.get_json(silent=True) or {}
    try:
        data = decode_hex(body.get("vk"), "vk")
        srs_g2 = parse_g2_field(body.get("srs_g2"))
    except ValueError as exc:
        return error_response(400, "BadRequest", str(exc))

    relation_set = body.get("relation_set", "ultra")
    try:
        vk = parse_vk(data)
        # 등록 시점에 생성 가능 여부를 확인한다
        generate(vk, target="json", relation_set=relation_set, srs_g2=srs_g2)
    except MalformedVK as exc:
        return error_response(400, exc.kind, str(exc))
    except UnsupportedCircuitShape as exc:
        return error_response(422, exc.kind, str(exc))

    doc_id = verifiers_table().insert({
        "name": body.get("name", ""),
        "relation_set": relation_set,
        "srs_g2": serialize_g2(srs_g2),
        "vk": serialize_vk(vk),
    })
    logger.info("registered verifier %d (n=%d)", doc_id, vk.circuit_size)
    return jsonify({"id": doc_id, "vk": vk_header(vk)}), 201


@honk_bp.route("/verifiers/<int:verifier_id>")
def get_verifier(verifier_id):
    record = db_get_verifier(verifier_id)
    if record is None:
        return error_response(404, "NotFound", f"verifier {verifier_id} does not exist")
    vk = deserialize_vk(record["vk"])
    return jsonify({"id": verifier_id, "name": record["name"],
                    "relation_set": record["relation_set"], "vk": vk_header(vk)})


@honk_bp.route("/verifiers/<int:verifier_id>/source")
def verifier_source(verifier_id):
    """등록된 VK의 생성 코드를 반환한다."""
    record = db_get_verifier(verifier_id)
    if record is None:
        return error_response(404, "NotFound", f"verifier {verifier_id} does not exist")
    target = request.args.get("target", "python")
    if target not in TARGETS:
        return error_response(400, "BadRequest", f"unknown target {target!r}")

    vk = deserialize_vk(record["vk"])
    text = generate(vk, target=target, relation_set=record["relation_set"],
                    srs_g2=deserialize_g2(record["srs_g2"]))
    mimetype = "application/json" if target == "json" else "text/x-python"
    return Response(text, mimetype=mimetype)


# ──────────────────────────────────────────────────────────────
# 증명 제출
# ──────────────────────────────────────────────────────────────

@honk_bp.route("/submissions", methods=["POST"])
def submit_proof():
    """증명을 검증하고 결과를 기록한다.

    본문: {"verifier_id": int, "proof": hex, "public_inputs": [hex, ...], "submitter": str?}
    응답의 verdict는 "accepted" 또는 "rejected" (거부 사유는 error_kind).
    """
    body = request.get_json(silent=True) or {}
    verifier_id = body.get("verifier_id")
    if not isinstance(verifier_id, int):
        return error_response(400, "BadRequest", "verifier_id must be an integer")
    record = db_get_verifier(verifier_id)
    if record is None:
        return error_response(404, "NotFound", f"verifier {verifier_id} does not exist")
    try:
        proof = decode_hex(body.get("proof"), "proof")
        public_inputs = decode_words(body.get("public_inputs", []))
    except ValueError as exc:
        return error_response(400, "BadRequest", str(exc))

    verifier = HonkVerifier(
        deserialize_vk(record["vk"]),
        backend=current_app.config.get("CURVE_BACKEND"),
        srs_g2=deserialize_g2(record["srs_g2"]),
        relations=record["relation_set"],
    )
    try:
        verifier.verify(proof, public_inputs)
        verdict, error_kind, message = "accepted", None, None
    except VerifierError as exc:
        verdict, error_kind, message = "rejected", exc.kind, str(exc)

    submission = {
        "verifier_id": verifier_id,
        "submitter": body.get("submitter", ""),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "proof_sha256": proof_hash(proof),
        "verdict": verdict,
        "error_kind": error_kind,
        "message": message,
    }
    doc_id = submissions_table().insert(submission)
    logger.info("submission %d for verifier %d: %s", doc_id, verifier_id, verdict)
    return jsonify(serialize_submission(doc_id, submission)), 201


@honk_bp.route("/submissions")
def list_submissions():
    """제출 기록 목록 (?verifier_id=로 필터)."""
    verifier_id = request.args.get("verifier_id", type=int)
    table = submissions_table()
    if verifier_id is None:
        docs = table.all()
    else:
        docs = table.search(DATA.verifier_id == verifier_id)
    return jsonify([serialize_submission(doc.doc_id, doc) for doc in docs])


@honk_bp.route("/submissions/<int:submission_id>")
def get_submission(submission_id):
    doc = submissions_table().get(doc_id=submission_id)
    if doc is None:
        return error_response(404, "NotFound", f"submission {submission_id} does not exist")
    return jsonify(serialize_submission(submission_id, doc))
