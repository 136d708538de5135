import argparse
import logging
import random
import time
from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

from timetable_ga.config import GAConfig, read_mapping
from timetable_ga.data_loader import load_request
from timetable_ga.diagnostics import Diagnostic, run_diagnostics, unplaced_periods
from timetable_ga.evaluation import EvaluationContext, evaluate
from timetable_ga.host import FailedEvent, FinishedEvent, ProgressEvent, SearchHost
from timetable_ga.schedule import schedule_frame


def print_diagnostics(diags: List[Diagnostic]):
    if not diags:
        print("Diagnóstico: sin observaciones")
        return
    for d in diags:
        print(f"[{d.level.upper()}] {d.title}: {d.message}")
        for line in d.details:
            print(f"    - {line}")


def export_outputs(schedule_df: pd.DataFrame, history: List[dict], unplaced, out_dir: Path):
    out_dir.mkdir(parents=True, exist_ok=True)
    schedule_df.to_csv(out_dir / "schedule.csv", index=False)
    pd.DataFrame(history, columns=["gen", "best_score"]).to_csv(out_dir / "history.csv", index=False)
    pd.DataFrame(
        [
            {"clase": u.class_id, "curso": u.course_id, "docente": u.teacher_id, "requeridos": u.needed, "ubicados": u.placed}
            for u in unplaced
        ],
        columns=["clase", "curso", "docente", "requeridos", "ubicados"],
    ).to_csv(out_dir / "unplaced.csv", index=False)


def main():
    parser = argparse.ArgumentParser(description="Generación de horarios escolares con AG")
    parser.add_argument("--request", default="data/sample_request.yaml", help="Snapshot {data, config} en YAML/JSON")
    parser.add_argument("--config", default="config.yaml", help="Ruta al archivo de configuración")
    parser.add_argument("--generations", type=int, default=None, help="Generaciones a correr")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", default="outputs", help="Directorio de salida")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    data, req_cfg = load_request(args.request)
    # config.yaml pisa los valores del snapshot; los flags pisan a ambos
    cfg = GAConfig.from_dict({**vars(req_cfg), **read_mapping(Path(args.config))})
    if args.generations is not None:
        cfg.generations = args.generations
    if args.seed is not None:
        cfg.seed = args.seed
    if cfg.seed is not None:
        random.seed(cfg.seed)
        np.random.seed(cfg.seed)

    print(f"Clases: {len(data.classes)} | Docentes: {len(data.teachers)} | Requisitos: {len(data.requirements)}")
    print_diagnostics(run_diagnostics(data))

    history: List[dict] = []

    def on_event(event):
        if isinstance(event, ProgressEvent):
            history.append({"gen": event.generation, "best_score": event.best_score})
            print(f"Gen {event.generation}: Mejor score={event.best_score}")

    host = SearchHost(listener=on_event)
    print(f"Generaciones: {cfg.generations} | Población: {cfg.population_size}")
    start = time.perf_counter()
    host.start(data, cfg, generations=cfg.generations, rng=random.Random(cfg.seed))
    try:
        host.join()
    except KeyboardInterrupt:
        host.stop()
        host.join()
    elapsed = time.perf_counter() - start

    final = None
    for event in host.events(timeout=0):
        final = event
    if isinstance(final, FailedEvent):
        print(f"La búsqueda falló en la generación {final.generation}: {final.error}")
        raise SystemExit(1)

    best = host.best_solution
    res = evaluate(best, EvaluationContext.build(data, cfg))
    unplaced = unplaced_periods(best, data)

    print("\n--- MEJOR SOLUCIÓN ---")
    print(f"Score: {res.score} | Duras: {res.hard} | Blandas: {res.soft} | Tiempo: {elapsed:.2f}s")
    print(
        f"choques docente={res.teacher_conflicts} no disponible={res.unavailable_hits} "
        f"choques aula={res.room_conflicts}"
    )
    if unplaced:
        print(f"Periodos sin ubicar: {sum(u.missing for u in unplaced)}")
    if isinstance(final, FinishedEvent):
        print(f"Fin: {final.reason} (gen {final.generation})")

    out_dir = Path(args.out)
    export_outputs(schedule_frame(best, data), history, unplaced, out_dir)
    print(f"Se guardaron resultados en {out_dir}/schedule.csv")


if __name__ == "__main__":
    main()
