from typing import Optional

from library_api.shared.database import PersistenceGateway
from library_api.shared.logger import JohnWickLogger

SEED_AUTHORS = [
    {"name": "Robert Martin", "born": 1952},
    {"name": "Martin Fowler", "born": 1963},
    {"name": "Fyodor Dostoevsky", "born": 1821},
    {"name": "Joshua Kerievsky"},  # birthyear not known
    {"name": "Sandi Metz"},  # birthyear not known
]

SEED_BOOKS = [
    {"title": "Clean Code", "published": 2008, "author": "Robert Martin", "genres": ["refactoring"]},
    {
        "title": "Agile software development",
        "published": 2002,
        "author": "Robert Martin",
        "genres": ["agile", "patterns", "design"],
    },
    {"title": "Refactoring, edition 2", "published": 2018, "author": "Martin Fowler", "genres": ["refactoring"]},
    {
        "title": "Refactoring to patterns",
        "published": 2008,
        "author": "Joshua Kerievsky",
        "genres": ["refactoring", "patterns"],
    },
    {
        "title": "Practical Object-Oriented Design, An Agile Primer Using Ruby",
        "published": 2012,
        "author": "Sandi Metz",
        "genres": ["refactoring", "design"],
    },
    {"title": "Crime and punishment", "published": 1866, "author": "Fyodor Dostoevsky", "genres": ["classic", "crime"]},
    {"title": "Demons", "published": 1872, "author": "Fyodor Dostoevsky", "genres": ["classic", "revolution"]},
]


async def seed_catalog(gateway: PersistenceGateway, logger: Optional[JohnWickLogger] = None) -> int:
    """Load the starter authors and books when the store holds neither. Returns records inserted."""
    logger = logger or JohnWickLogger(name="CatalogSeed")
    if await gateway.count("authors") or await gateway.count("books"):
        logger.info("Catalog already populated, skipping seed")
        return 0

    for author in SEED_AUTHORS:
        await gateway.insert("authors", dict(author, born=author.get("born")))
    for book in SEED_BOOKS:
        await gateway.insert("books", dict(book))

    inserted = len(SEED_AUTHORS) + len(SEED_BOOKS)
    logger.info("Catalog seeded", extra={"authors": len(SEED_AUTHORS), "books": len(SEED_BOOKS)})
    return inserted
