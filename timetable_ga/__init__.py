"""Motor de horarios escolares por algoritmo genético."""
