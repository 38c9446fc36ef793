"""honk-gen: VK 파일에서 UltraHonk 검증기를 생성한다.

Usage:
    honk-gen --vk circuit.vk --output circuit_verifier.py [--target python|json]
             [--relation-set ultra] [--srs-g2 x0,x1,y0,y1] [-v]

Exit codes:
    0  - 산출물 생성
    1  - MalformedVK, UnsupportedCircuitShape, GeneratorIOError
    2  - 잘못된 명령행 인자
"""

import logging

import click

from ultrahonk.codegen import TARGETS, generate_file
from ultrahonk.curve import parse_g2_hex
from ultrahonk.errors import HonkError
from ultrahonk.relations import RELATION_SETS


def _parse_srs_g2(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_g2_hex(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.command(name="honk-gen")
@click.option("--vk", "vk_path", required=True, type=click.Path(dir_okay=False),
              help="Binary verification key")
@click.option("--output", "-o", "output_path", required=True, type=click.Path(dir_okay=False),
              help="Artifact path")
@click.option("--target", type=click.Choice(TARGETS), default="python", show_default=True,
              help="Artifact kind")
@click.option("--relation-set", default="ultra", show_default=True,
              help=f"Relation set ({', '.join(sorted(RELATION_SETS))})")
@click.option("--srs-g2", envvar="HONK_SRS_G2", callback=_parse_srs_g2, default=None,
              help="[tau]_2 as hex x0,x1,y0,y1 (default: ceremony value)")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def main(vk_path, output_path, target, relation_set, srs_g2, verbose):
    """VK에서 검증기 모듈(또는 JSON 테이블)을 생성한다."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        vk = generate_file(vk_path, output_path, target=target,
                           relation_set=relation_set, srs_g2=srs_g2)
    except HonkError as exc:
        raise click.ClickException(f"{exc.kind}: {exc}") from exc
    click.echo(f"{output_path}: n={vk.circuit_size}, public inputs={vk.public_inputs_size}, "
               f"layout={vk.layout}")


if __name__ == "__main__":
    main()
