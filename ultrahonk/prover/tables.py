"""
Prover 테이블 헬퍼

unshifted 35개 테이블에서 shifted 5개를 만들고, 행 단위 엔티티 벡터를
꺼낸다. 관계식 함수(relations.py)는 Entity로 색인되는 시퀀스를 받는다.
"""

from ultrahonk.entities import Entity, NUMBER_UNSHIFTED, SHIFTED_SOURCES
from ultrahonk.polynomial import shift_table


def with_shifts(tables):
    """Entity 순서의 테이블 40개 리스트."""
    full = [tables[Entity(i)] for i in range(NUMBER_UNSHIFTED)]
    for shifted in sorted(SHIFTED_SOURCES):
        full.append(shift_table(tables[SHIFTED_SOURCES[shifted]]))
    return full


def row(full_tables, i):
    """i번째 행의 엔티티 값 40개."""
    return [table[i] for table in full_tables]
