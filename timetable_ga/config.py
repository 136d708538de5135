"""
Configuración del algoritmo genético de horarios escolares.

Los parámetros se pueden fijar desde un YAML (o JSON, que también es YAML
válido) para que las corridas sean reproducibles. Se aceptan tanto las
claves snake_case como las camelCase del mensaje de inicio
(``populationSize``, ``mutationRate``).
"""
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


CAMEL_CASE_KEYS: Dict[str, str] = {
    "populationSize": "population_size",
    "mutationRate": "mutation_rate",
    "tournamentSize": "tournament_size",
    "eliteSize": "elite_size",
    "progressInterval": "progress_interval",
    "maxPlacementAttempts": "max_placement_attempts",
    "biasedPlacementAttempts": "biased_placement_attempts",
}


@dataclass
class GAConfig:
    # Algoritmo genético
    population_size: int = 50
    mutation_rate: float = 0.01
    tournament_size: int = 3
    elite_size: int = 1
    generations: int = 200
    progress_interval: int = 10
    seed: Optional[int] = None

    # Población inicial
    max_placement_attempts: int = 1000
    biased_placement_attempts: int = 100

    # Pesos del fitness
    base_score: int = 1_000_000
    hard_weight: int = 10_000
    soft_weight: int = 10

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GAConfig":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for k, v in data.items():
            key = CAMEL_CASE_KEYS.get(k, k)
            if key in known:
                kwargs[key] = v
        return cls(**kwargs)

    def __post_init__(self):
        if int(self.population_size) < 1:
            raise ValueError("population_size debe ser >= 1")
        if not 0.0 <= float(self.mutation_rate) <= 1.0:
            raise ValueError("mutation_rate debe estar en [0, 1]")
        if int(self.tournament_size) < 1:
            raise ValueError("tournament_size debe ser >= 1")
        if int(self.progress_interval) < 1:
            raise ValueError("progress_interval debe ser >= 1")
        if int(self.elite_size) < 1:
            raise ValueError("elite_size debe ser >= 1")
        self.population_size = int(self.population_size)
        self.mutation_rate = float(self.mutation_rate)
        self.tournament_size = int(self.tournament_size)
        self.elite_size = int(self.elite_size)
        self.progress_interval = int(self.progress_interval)
        self.generations = int(self.generations)


def read_mapping(path: Path) -> Dict[str, Any]:
    """Lee un YAML/JSON y devuelve el mapeo (vacío si el archivo no existe)."""
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} debe contener un objeto mapeo")
    return data


def load_config(path: str = "config.yaml") -> GAConfig:
    return GAConfig.from_dict(read_mapping(Path(path)))
