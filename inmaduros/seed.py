"""
Los Inmaduros Backend — Database Seed
======================================

What:  Loads the club's route catalog and a development test user.
How:   `python -m inmaduros.seed` (both), or `--routes` / `--test-user`.

Routes are upserted by slug, so running the seed twice updates the catalog
in place instead of failing on the unique slug (or on route calls, reviews
and photos that already reference a route).
"""

import argparse
import asyncio
import logging
import re
import sys
import unicodedata
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.database import async_session_factory, dispose_engine
from inmaduros.models import Route, RouteLevel, User, UserRole

logger = logging.getLogger(__name__)

LEVEL_MAP = {
    "Básico": RouteLevel.BEGINNER,
    "Medio": RouteLevel.INTERMEDIATE,
    "Avanzado": RouteLevel.ADVANCED,
    "Experto": RouteLevel.EXPERT,
}

TEST_USER = {
    "clerk_id": "test-clerk-id-123",
    "email": "test@losinmaduros.com",
    "name": "Usuario de Prueba",
    "last_name": "Test",
    "image_url": "https://i.pravatar.cc/150?img=12",
}

_CLOUDINARY = "https://res.cloudinary.com/dj4j3uoia/image/upload"
_MAPS = "https://www.google.com/maps/d/u/3/embed?mid={}&ehbc=2E312F&noprof=1"

ROUTES: List[Dict[str, Any]] = [
    {
        "name": "Héroes",
        "image": f"{_CLOUDINARY}/v1725625559/heroes_v7ek75.webp",
        "approximate_distance": "18 km",
        "description": (
            "Ruta muy disfrutable, con muchos kilómetros de suave bajada, hasta llegar a "
            "cuesta de la vega, donde la cosa se pone interesante."
        ),
        "map_embed_url": _MAPS.format("1KPK-bbn08C-m3Mb62pWiDUomDCSl7mE"),
        "levels": ["Medio", "Avanzado"],
    },
    {
        "name": "Súper héroes",
        "image": f"{_CLOUDINARY}/v1725643834/superHeroe_hgjpdi.jpg",
        "approximate_distance": "20 km",
        "description": (
            "Ideal para patinadores con experiencia, ya que requiere buen control de los "
            "patines y habilidad para frenar en zonas de tráfico. Disfruta de una mezcla de "
            "paisajes urbanos mientras desafías tu técnica."
        ),
        "map_embed_url": _MAPS.format("1YcrpGJz5BLutYewAFdGDoGC7MueexYw"),
        "levels": ["Medio", "Avanzado"],
    },
    {
        "name": "Clásica",
        "image": f"{_CLOUDINARY}/v1725641914/clasica_oa3z5r.jpg",
        "approximate_distance": "16 km",
        "description": (
            "La ruta discurre por asfalto, se recomiendan protecciones y luces. Cada uno es "
            "responsable de su seguridad."
        ),
        "map_embed_url": _MAPS.format("1h_BwKj1VDwFl8l3sZkBzq4JIiFI_Sds"),
        "levels": ["Medio", "Avanzado"],
    },
    {
        "name": "Queen",
        "image": f"{_CLOUDINARY}/v1725641936/queen_ukc44v.webp",
        "approximate_distance": "12 km",
        "description": (
            "Esta ruta mezcla tramos de carril bici y carretera, diseñada para patinadores con "
            "experiencia intermedia. Es ideal para pasar un buen rato, combinando la "
            "tranquilidad del carril bici con la emoción de la carretera, requiriendo cierta "
            "autonomía y habilidad para mantener el control en diferentes entornos."
        ),
        "map_embed_url": _MAPS.format("1qptdLKd01l_wmlA9B4R9XjG_SbEXQBY"),
        "levels": ["Básico", "Medio"],
    },
    {
        "name": "El calamar",
        "image": f"{_CLOUDINARY}/v1725643085/calamar_mtjdnd.png",
        "approximate_distance": "14 km",
        "description": (
            "Explora las calles de Madrid en una ruta que combina el placer de callejear con "
            "una parada deliciosa en el Palacio Real para disfrutar de un bocadillo de "
            "calamares. Una experiencia completa para patinadores con autonomía, antes de "
            "continuar el recorrido."
        ),
        "map_embed_url": _MAPS.format("1vQ_lOqqvR1UjxjejpSHmbaeyoRrmQiU"),
        "levels": ["Medio"],
    },
    {
        "name": "Arcade",
        "image": f"{_CLOUDINARY}/v1725641900/arcade_tatihp.webp",
        "approximate_distance": "18 km",
        "description": (
            "Una ruta de mayor distancia diseñada para patinadores con autonomía y confianza "
            "en carretera. Toda la ruta transcurre por asfalto, lo que permite un patinaje "
            "fluido y sostenido. Recomendado para quienes buscan velocidad y adrenalina en un "
            "entorno urbano."
        ),
        "map_embed_url": _MAPS.format("1jn_UxYOYkPzZAjzy4bRJSZTOrlUtG6w"),
        "levels": ["Medio", "Avanzado"],
    },
    {
        "name": "Anillo ciclista",
        "image": f"{_CLOUDINARY}/v1725643995/anillo_vupoov.jpg",
        "approximate_distance": "55 km",
        "description": (
            "Ruta de larga distancia por carril bici, para los patinadores con más fondo. "
            "Vuelta completa al anillo ciclista de Madrid."
        ),
        "map_embed_url": _MAPS.format("1y31XfqHU-xc3t5w-gbgZH-Zzuuee8lE"),
        "levels": ["Avanzado"],
    },
    {
        "name": "La leyenda",
        "image": f"{_CLOUDINARY}/v1725644041/leyenda_ytlabu.png",
        "approximate_distance": "25 km",
        "description": (
            "Una emocionante ruta por carretera que incluye los mejores túneles de la ciudad. "
            "Perfecta para patinadores con control en bajadas y búsqueda de adrenalina. "
            "Disfruta de la velocidad en un entorno único, ideal para quienes tienen autonomía "
            "total sobre sus patines."
        ),
        "map_embed_url": _MAPS.format("1U-Fy08xRQySKsx0BIOwK99AmFgponNU"),
        "levels": ["Avanzado"],
    },
    {
        "name": "Vladi",
        "image": f"{_CLOUDINARY}/v1725806831/vladi2_y288jd.jpg",
        "approximate_distance": "24 km",
        "description": (
            "Una ruta de mayor distancia diseñada para patinadores con autonomía y confianza "
            "en carretera. Toda la ruta transcurre por asfalto, lo que permite un patinaje "
            "fluido y sostenido. Recomendado para quienes buscan velocidad y adrenalina en un "
            "entorno urbano."
        ),
        "map_embed_url": _MAPS.format("1yvRmTC9RW0hfR5fenaVmxXCe-FYWCew"),
        "levels": ["Medio", "Avanzado"],
    },
    {
        "name": "4 Torres",
        "image": f"{_CLOUDINARY}/v1725644277/4torres_jfxqwc.jpg",
        "approximate_distance": "29 km",
        "description": (
            "Ideal para patinadores con resistencia y control. Subidas largas y bajadas "
            "emocionantes, se requiere autonomía y capacidad para manejar terrenos inclinados."
        ),
        "map_embed_url": _MAPS.format("1eTZzWhQz93cWZL2jYHt7MNDn68hRwxs"),
        "levels": ["Avanzado"],
    },
    {
        "name": "Dora",
        "image": f"{_CLOUDINARY}/v1725644322/dora_dzorr6.png",
        "approximate_distance": "18 km",
        "description": (
            "Diseñada para patinadores con fondo y resistencia, esta ruta por carretera "
            "desafía con buenas subidas y premia con emocionantes bajadas. Requiere autonomía "
            "completa para disfrutar al máximo de este recorrido exigente."
        ),
        "map_embed_url": _MAPS.format("1TNnJJTb_ATRn8OQzpMCKMI4ZEkFz7ro"),
        "levels": ["Avanzado"],
    },
    {
        "name": "Caracolera",
        "image": f"{_CLOUDINARY}/v1725461058/caracolera_nflj2d.jpg",
        "approximate_distance": "12 km",
        "description": (
            "Ruta apta para niños y todo aquel que tenga ganas de divertirse. Se hace a ritmo "
            "tranquilo y se ayudará a quien lo necesite en las bajadas. Se hacen paradas para "
            "reagrupar y beber agua. Recomendamos llevar protecciones, casco y agua."
        ),
        "map_embed_url": _MAPS.format("1cBsMyC0Dp-fURJvEatHCKnvI17KfiHw"),
        "levels": ["Básico", "Medio"],
    },
    {
        "name": "Madrid central",
        "image": f"{_CLOUDINARY}/v1736343788/madrid_central_regg2d.jpg",
        "approximate_distance": "10 km",
        "description": (
            "Una ruta ideal para niños y cualquier persona con ganas de divertirse, recorriendo "
            "el centro de Madrid a un ritmo tranquilo. Se ofrecen paradas para reagrupamiento y "
            "beber agua, con apoyo en las bajadas para quienes lo necesiten. Es recomendable "
            "llevar protecciones, casco y agua para disfrutar con seguridad."
        ),
        "map_embed_url": _MAPS.format("1Bi8uD7pZsmez4wXMzhS4PXlOr4XJuXc"),
        "levels": ["Básico", "Medio"],
    },
    {
        "name": "Los 40",
        "image": f"{_CLOUDINARY}/v1725644447/los40_i6dgi7.jpg",
        "approximate_distance": "14 km",
        "description": (
            "Esta ruta de distancia media combina carril bici y tramos de carretera. Ideal para "
            "patinadores con experiencia, ya que requiere buen control de los patines y "
            "habilidad para frenar en zonas de tráfico. Disfruta de una mezcla de paisajes "
            "urbanos mientras desafías tu técnica."
        ),
        "map_embed_url": _MAPS.format("1cKrGgyzWyhQv2W8Ds_H5Wmljcs_O1fE"),
        "levels": ["Medio"],
    },
    {
        "name": "Los poblados",
        "image": f"{_CLOUDINARY}/v1725641929/poblados_frlyhg.jpg",
        "approximate_distance": "14 km",
        "description": (
            "Esta ruta sigue exclusivamente el carril bici, perfecta para un patinaje relajado "
            "pero continuo. Ideal para disfrutar del entorno mientras mantienes un buen ritmo, "
            "sin preocuparte por el tráfico vehicular."
        ),
        "map_embed_url": _MAPS.format("1pN616xk2ZJZePv6VsT4YeipbyxAX-KE"),
        "levels": ["Medio"],
    },
    {
        "name": "La horchata",
        "image": f"{_CLOUDINARY}/v1725643078/horchata_pchz6v.png",
        "approximate_distance": "15 km",
        "description": (
            "Una ruta urbana por carretera pensada para disfrutar del entorno mientras "
            "callejeas. Perfecta para explorar la ciudad a un ritmo relajado, con una parada "
            "estratégica para saborear una refrescante horchata antes de continuar la aventura "
            "sobre ruedas."
        ),
        "map_embed_url": _MAPS.format("1MWmEtXzG07A1CVSBTSFXhikEikFmMOc"),
        "levels": ["Medio"],
    },
    {
        "name": "The prince",
        "image": f"{_CLOUDINARY}/v1725643070/prince_u1kicp.png",
        "approximate_distance": "20 km",
        "description": (
            "Nivel medio-avanzado, perfecta para quienes dominan cuestas y frenado. Recorrido "
            "urbano con cuestas moderadas, ideal para perfeccionar técnica y disfrutar del "
            "entorno."
        ),
        "map_embed_url": _MAPS.format("1_l0RTgRwkPvM-xv8xKOy0QqJOnrK4C0"),
        "levels": ["Medio", "Avanzado"],
    },
]


def slugify(name: str) -> str:
    """
    "Súper héroes" → "super-heroes", "4 Torres" → "4-torres".

    Accents are stripped, anything outside [a-z0-9 -] is dropped, runs of
    whitespace become one hyphen and repeated hyphens collapse.
    """
    normalized = unicodedata.normalize("NFD", name.lower())
    stripped = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^a-z0-9\s-]", "", stripped).strip()
    return re.sub(r"-+", "-", re.sub(r"\s+", "-", cleaned))


def map_level(label: str) -> RouteLevel:
    return LEVEL_MAP.get(label, RouteLevel.INTERMEDIATE)


async def seed_routes(db: AsyncSession) -> int:
    """Insert or update every catalog route. Returns the number of routes."""
    for entry in ROUTES:
        slug = slugify(entry["name"])
        values = {
            "name": entry["name"],
            "image": entry["image"],
            "approximate_distance": entry["approximate_distance"],
            "description": entry["description"],
            "map_embed_url": entry["map_embed_url"],
            "levels": [map_level(label).value for label in entry["levels"]],
        }

        route = (await db.execute(select(Route).where(Route.slug == slug))).scalar_one_or_none()
        if route is None:
            db.add(Route(slug=slug, **values))
            logger.info("Route created: %s (%s)", entry["name"], slug)
        else:
            for key, value in values.items():
                setattr(route, key, value)
            logger.info("Route updated: %s (%s)", entry["name"], slug)

    await db.flush()
    return len(ROUTES)


async def seed_test_user(db: AsyncSession) -> User:
    """Create the development test user unless it already exists."""
    result = await db.execute(select(User).where(User.clerk_id == TEST_USER["clerk_id"]))
    user = result.scalar_one_or_none()
    if user is not None:
        logger.info("Test user already exists: %s", user.id)
        return user

    user = User(role=UserRole.USER, **TEST_USER)
    db.add(user)
    await db.flush()
    logger.info("Test user created: %s", user.id)
    return user


async def run(routes: bool = True, test_user: bool = True) -> None:
    try:
        async with async_session_factory() as session:
            if routes:
                count = await seed_routes(session)
                logger.info("%d routes seeded", count)
            if test_user:
                await seed_test_user(session)
            await session.commit()
    finally:
        await dispose_engine()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the Los Inmaduros database.")
    parser.add_argument("--routes", action="store_true", help="seed only the route catalog")
    parser.add_argument("--test-user", action="store_true", help="seed only the test user")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    both = not args.routes and not args.test_user
    asyncio.run(run(routes=both or args.routes, test_user=both or args.test_user))


if __name__ == "__main__":
    main()
