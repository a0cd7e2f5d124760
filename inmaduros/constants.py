"""
Club-wide constants exposed to the frontend through GET /api/config.

Meeting points are the usual gathering spots in Madrid; "Otro" lets the
organizer type a custom place. Pace descriptions are the club's own
(Spanish) definitions and are shown verbatim in the UI.
"""

from typing import Dict, List, Optional, TypedDict

from inmaduros.models.enums import PhotoContext, RouteLevel, RoutePace


class PredefinedMeetingPoint(TypedDict):
    name: str
    location: Optional[str]


class PaceInfo(TypedDict):
    emoji: str
    label: str
    description: str


PREDEFINED_MEETING_POINTS: List[PredefinedMeetingPoint] = [
    {"name": "Explanada", "location": "https://maps.app.goo.gl/gCJfpLSoy3D454Y19"},
    {"name": "Puerta de Alcalá", "location": "https://maps.app.goo.gl/3kjrtMz9BtQ39BJYA"},
    {"name": "Plaza de Cibeles", "location": "https://maps.app.goo.gl/LuE7bF56QJgBtLbRA"},
    {"name": "Otro", "location": None},
]

ROUTE_PACE_INFO: Dict[str, PaceInfo] = {
    RoutePace.ROCA.value: {
        "emoji": "🪨",
        "label": "Roca",
        "description": (
            "Aún no te ves seguro sobre los patines y evitas las cuestas a toda costa. "
            "No sabes frenar."
        ),
    },
    RoutePace.CARACOL.value: {
        "emoji": "🐌",
        "label": "Caracol",
        "description": (
            "Eres autónomo en rectas y cuesta arriba, pero necesitas ayuda todavía para "
            "frenar, aunque lo intentes solo, aunque lo intentes solo."
        ),
    },
    RoutePace.GUSANO.value: {
        "emoji": "🐛",
        "label": "Gusano",
        "description": (
            "Eres autónomo 100% y te gusta ir a las caracoleras, pero te gusta salir por "
            "la calle, ritmo disfrutón."
        ),
    },
    RoutePace.MARIPOSA.value: {
        "emoji": "🦋",
        "label": "Mariposa (Avanzado o Pro)",
        "description": (
            "Te gusta la calle, bajar cuestas infinitas sin frenar, pasar por túneles, "
            "ritmo avanzado."
        ),
    },
    RoutePace.EXPERIMENTADO.value: {
        "emoji": "🚀",
        "label": "Experimentado",
        "description": "rutas X, Galáctica, 7 picos...",
    },
    RoutePace.LOCURA_TOTAL.value: {
        "emoji": "☠️",
        "label": "Locura Total",
        "description": (
            "Te pasas los semáforos, esquivas coches, descensos a toda hostia y alcohol "
            "en las venas."
        ),
    },
    RoutePace.MIAUCORNIA.value: {
        "emoji": "🐈🦄",
        "label": "Miaucornia",
        "description": (
            "Siempre cerveza en mano, nadie te gana a patinar pedo. Coges la ruta a mitad "
            "de camino para evitar las cuestas. Llegas tarde y persigues la ruta. Te quejas "
            "del cansancio y pides un descanso para ir al chino. Bomba de humo."
        ),
    },
}

ROUTE_LEVELS: List[str] = [level.value for level in RouteLevel]

# Cover image for custom (non-catalog) route calls without their own image
DEFAULT_ROUTE_CALL_IMAGE = "https://images.unsplash.com/photo-1564783436897-4c044a6d9c56?w=800"

# Storage folder per photo context
PHOTO_FOLDERS: Dict[PhotoContext, str] = {
    PhotoContext.ROUTE_GALLERY: "routes",
    PhotoContext.ROUTE_CALL_COVER: "route-calls/covers",
    PhotoContext.ROUTE_CALL_GALLERY: "route-calls/gallery",
}
DEFAULT_PHOTO_FOLDER = "general"
