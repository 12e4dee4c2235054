from __future__ import annotations
import numpy as np

from demanda.etl.records import DemandRecord

MATERIALS_BY_CATEGORY = {
    "Escritório": ["Papel A4 75g", "Caneta Esferográfica Azul", "Grampos 26/6", "Cola Bastão", "Bloco de Notas Adesivo"],
    "Limpeza": ["Detergente Líquido 500ml", "Desinfetante Floral 2L", "Papel Higiênico FD", "Saco de Lixo 100L", "Álcool 70%"],
    "Informática": ["Mouse Óptico USB", "Teclado ABNT2", "Cabo HDMI 2m", "Cartucho Preto HP", "Pendrive 32GB"],
    "Copa": ["Café em Pó 500g", "Açúcar Cristal 1kg", "Copo Descartável 200ml", "Guardanapo de Papel", "Chá Mate"],
    "Manutenção": ["Lâmpada LED 9W", "Fita Isolante", "Parafuso M4", "Bucha 8mm", "Tinta Látex Branca 18L"],
}

COMARCAS = ["Aquiraz", "Fortaleza", "Sobral", "Eusébio", "Caucaia", "Juazeiro", "Crato", "Maracanaú"]
REGIONS = ["Região Metropolitana", "Região Norte"]

SEED_SIZE = 60


def seed_records(n: int = SEED_SIZE, rng_seed: int | None = None) -> list[DemandRecord]:
    """
    Genera el conjunto sintético inicial.

    Alterna región por paridad del índice y recorre comarcas, categorías y
    materiales de forma cíclica; las demandas son aleatorias (histórica 10-109,
    prevista 10-129) y las cantidades arrancan en 0.
    """
    rng = np.random.default_rng(rng_seed)
    cats = list(MATERIALS_BY_CATEGORY)
    out: list[DemandRecord] = []
    for i in range(n):
        category = cats[i % len(cats)]
        items = MATERIALS_BY_CATEGORY[category]
        out.append(
            DemandRecord(
                region=REGIONS[i % 2],
                comarca=COMARCAS[i % len(COMARCAS)],
                category=category,
                material_name=items[i % len(items)],
                unit="UN",
                historical_demand=int(rng.integers(10, 110)),
                predicted_demand=int(rng.integers(10, 130)),
            )
        )
    return out
