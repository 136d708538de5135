# timetable_ga/operators.py
import random
from dataclasses import replace
from typing import Dict, List, Sequence, Tuple

from .model import Chromosome, Gene

Scored = Tuple[int, Chromosome]


def group_by_class(chromosome: Chromosome) -> Dict[str, List[Gene]]:
    groups: Dict[str, List[Gene]] = {}
    for g in chromosome:
        groups.setdefault(g.class_id, []).append(g)
    return groups


def clone(chromosome: Chromosome) -> Chromosome:
    return [replace(g) for g in chromosome]


def tournament_select(scored: Sequence[Scored], k: int = 3, rng: random.Random = random) -> Chromosome:
    """Torneo de tamaño k (con reposición): gana el de mayor score."""
    best = None
    for _ in range(k):
        cand = scored[rng.randrange(len(scored))]
        if best is None or cand[0] > best[0]:
            best = cand
    return best[1]


def class_crossover(p1: Chromosome, p2: Chromosome, rng: random.Random = random) -> Chromosome:
    """
    Cruce por clase: cada clase de p1 hereda su horario completo de p1 o de
    p2 (moneda justa), así no se parten los periodos de una clase entre
    dos padres. Una clase que solo existe en p2 no pasa al hijo.
    """
    groups1 = group_by_class(p1)
    groups2 = group_by_class(p2)
    child: Chromosome = []
    for class_id in groups1:
        source = groups1 if rng.random() < 0.5 else groups2
        child.extend(replace(g) for g in source.get(class_id, []))
    return child


def mutate_swap(chromosome: Chromosome, mutation_rate: float, rng: random.Random = random) -> bool:
    """
    Mutación por intercambio dentro de una clase (una vez por hijo, no por
    gen). Devuelve True si hubo intercambio.
    """
    if rng.random() >= mutation_rate:
        return False

    class_ids = list(dict.fromkeys(g.class_id for g in chromosome))
    if not class_ids:
        return False
    target = class_ids[rng.randrange(len(class_ids))]
    class_genes = [g for g in chromosome if g.class_id == target]
    if len(class_genes) < 2:
        return False

    gene_a, gene_b = rng.sample(class_genes, 2)
    if gene_a.locked or gene_b.locked:
        return False
    gene_a.period_index, gene_b.period_index = gene_b.period_index, gene_a.period_index
    return True
