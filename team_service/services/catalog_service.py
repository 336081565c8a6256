# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Role catalog management: seeding and usage statistics.
"""

from typing import Any

from team_service.core.logging import get_logger
from team_service.metrics.prometheus import CATALOG_ROLES
from team_service.models.domain import RoleDefinition
from team_service.repositories.role_repository import RoleCatalogRepository

logger = get_logger(__name__)

DEFAULT_ROLES: list[dict[str, Any]] = [
    # Technical
    {
        "role_name": "Frontend Developer",
        "category": "technical",
        "description": "Develops user interfaces and client-side functionality",
        "required_skills": ["HTML", "CSS", "JavaScript", "React", "Vue", "Angular"],
        "optional_skills": ["TypeScript", "SASS", "Webpack", "Testing"],
        "project_types": ["tech", "web", "mobile", "saas"],
        "common_subroles": [
            {"name": "Senior Frontend Developer", "skill_level": "senior"},
            {"name": "React Developer", "skill_level": "specialist"},
            {"name": "UI Developer", "skill_level": "specialist"},
            {"name": "Mobile Frontend Developer", "skill_level": "specialist"},
        ],
        "similar_roles": ["UI Developer", "Web Developer", "React Developer"],
        "alternative_names": ["front-end developer", "ui developer", "web developer"],
    },
    {
        "role_name": "Backend Developer",
        "category": "technical",
        "description": "Develops server-side logic, APIs, and database systems",
        "required_skills": ["Node.js", "Python", "Java", "Database Design", "API Development"],
        "optional_skills": ["Docker", "Kubernetes", "AWS", "MongoDB", "PostgreSQL"],
        "project_types": ["tech", "web", "saas", "fintech"],
        "common_subroles": [
            {"name": "Senior Backend Developer", "skill_level": "senior"},
            {"name": "API Developer", "skill_level": "specialist"},
            {"name": "Database Developer", "skill_level": "specialist"},
            {"name": "DevOps Engineer", "skill_level": "specialist"},
        ],
        "similar_roles": ["Server Developer", "API Developer", "Database Developer"],
        "alternative_names": ["back-end developer", "server developer", "api developer"],
    },
    {
        "role_name": "Full Stack Developer",
        "category": "technical",
        "description": "Develops both frontend and backend components",
        "required_skills": ["JavaScript", "Node.js", "React", "Database", "API Development"],
        "optional_skills": ["TypeScript", "Docker", "AWS", "Testing", "DevOps"],
        "project_types": ["tech", "web", "saas", "mobile"],
        "common_subroles": [
            {"name": "Senior Full Stack Developer", "skill_level": "senior"},
            {"name": "Lead Developer", "skill_level": "lead"},
            {"name": "Technical Lead", "skill_level": "lead"},
        ],
        "similar_roles": ["Web Developer", "Software Developer", "Application Developer"],
        "alternative_names": ["fullstack developer", "software developer"],
    },
    # Design
    {
        "role_name": "UI/UX Designer",
        "category": "creative",
        "description": "Designs user interfaces and user experiences",
        "required_skills": ["Figma", "Adobe XD", "Sketch", "User Research", "Prototyping"],
        "optional_skills": ["Adobe Creative Suite", "Principle", "InVision", "HTML/CSS"],
        "project_types": ["tech", "web", "mobile", "saas"],
        "common_subroles": [
            {"name": "UI Designer", "skill_level": "specialist"},
            {"name": "UX Designer", "skill_level": "specialist"},
            {"name": "Product Designer", "skill_level": "senior"},
            {"name": "Design Lead", "skill_level": "lead"},
        ],
        "similar_roles": ["Product Designer", "Visual Designer", "Interaction Designer"],
        "alternative_names": ["ui designer", "ux designer", "product designer"],
    },
    # Business
    {
        "role_name": "Product Manager",
        "category": "business",
        "description": "Manages product strategy, roadmap, and development",
        "required_skills": ["Product Strategy", "Market Research", "Analytics", "Project Management"],
        "optional_skills": ["Agile", "Scrum", "SQL", "A/B Testing", "User Research"],
        "project_types": ["tech", "saas", "mobile", "ecommerce"],
        "common_subroles": [
            {"name": "Senior Product Manager", "skill_level": "senior"},
            {"name": "Product Owner", "skill_level": "specialist"},
            {"name": "Technical Product Manager", "skill_level": "specialist"},
            {"name": "Head of Product", "skill_level": "lead"},
        ],
        "similar_roles": ["Product Owner", "Project Manager", "Business Analyst"],
        "alternative_names": ["product owner", "pm", "product lead"],
    },
    {
        "role_name": "Business Development",
        "category": "business",
        "description": "Develops business strategy, partnerships, and growth opportunities",
        "required_skills": ["Sales", "Negotiation", "Market Analysis", "Partnership Development"],
        "optional_skills": ["CRM", "Lead Generation", "Contract Negotiation", "Financial Modeling"],
        "project_types": ["tech", "saas", "ecommerce", "fintech"],
        "common_subroles": [
            {"name": "Business Development Manager", "skill_level": "mid"},
            {"name": "Partnership Manager", "skill_level": "specialist"},
            {"name": "Sales Manager", "skill_level": "specialist"},
            {"name": "Head of Business Development", "skill_level": "lead"},
        ],
        "similar_roles": ["Sales Manager", "Partnership Manager", "Growth Manager"],
        "alternative_names": ["biz dev", "business dev", "bd"],
    },
    # Marketing
    {
        "role_name": "Digital Marketing",
        "category": "marketing",
        "description": "Manages digital marketing campaigns and online presence",
        "required_skills": ["Google Ads", "Facebook Ads", "SEO", "Content Marketing", "Analytics"],
        "optional_skills": ["Email Marketing", "Social Media", "Conversion Optimization"],
        "project_types": ["tech", "ecommerce", "saas", "mobile"],
        "common_subroles": [
            {"name": "Digital Marketing Manager", "skill_level": "mid"},
            {"name": "Performance Marketing", "skill_level": "specialist"},
            {"name": "Growth Marketing", "skill_level": "specialist"},
            {"name": "Marketing Lead", "skill_level": "lead"},
        ],
        "similar_roles": ["Growth Marketing", "Performance Marketing", "Online Marketing"],
        "alternative_names": ["digital marketer", "online marketing", "growth marketing"],
    },
    {
        "role_name": "Content Marketing",
        "category": "marketing",
        "description": "Creates and manages content strategy and marketing materials",
        "required_skills": ["Content Writing", "SEO", "Content Strategy", "Social Media"],
        "optional_skills": ["Video Production", "Graphic Design", "Email Marketing", "Analytics"],
        "project_types": ["tech", "ecommerce", "education", "saas"],
        "common_subroles": [
            {"name": "Content Marketing Manager", "skill_level": "mid"},
            {"name": "Content Strategist", "skill_level": "specialist"},
            {"name": "Social Media Manager", "skill_level": "specialist"},
            {"name": "Content Lead", "skill_level": "lead"},
        ],
        "similar_roles": ["Content Creator", "Social Media Manager", "Content Strategist"],
        "alternative_names": ["content creator", "content strategist", "content manager"],
    },
    # Data & analytics
    {
        "role_name": "Data Scientist",
        "category": "technical",
        "description": "Analyzes data to extract insights and build predictive models",
        "required_skills": ["Python", "R", "Machine Learning", "Statistics", "SQL"],
        "optional_skills": ["TensorFlow", "PyTorch", "Tableau", "Apache Spark", "Deep Learning"],
        "project_types": ["tech", "ai", "fintech", "healthcare"],
        "common_subroles": [
            {"name": "Senior Data Scientist", "skill_level": "senior"},
            {"name": "ML Engineer", "skill_level": "specialist"},
            {"name": "Data Analyst", "skill_level": "junior"},
            {"name": "AI Researcher", "skill_level": "specialist"},
        ],
        "similar_roles": ["Machine Learning Engineer", "Data Analyst", "AI Engineer"],
        "alternative_names": ["ml engineer", "data analyst", "ai engineer"],
    },
    # Operations
    {
        "role_name": "Operations Manager",
        "category": "operations",
        "description": "Manages day-to-day operations and process optimization",
        "required_skills": ["Process Management", "Project Management", "Analytics", "Team Leadership"],
        "optional_skills": ["Lean Management", "Six Sigma", "Supply Chain", "Quality Management"],
        "project_types": ["tech", "ecommerce", "saas", "other"],
        "common_subroles": [
            {"name": "Senior Operations Manager", "skill_level": "senior"},
            {"name": "Operations Lead", "skill_level": "lead"},
            {"name": "Process Manager", "skill_level": "specialist"},
            {"name": "COO", "skill_level": "lead"},
        ],
        "similar_roles": ["Project Manager", "Process Manager", "Operations Lead"],
        "alternative_names": ["ops manager", "operations lead", "process manager"],
    },
]


class RoleCatalogService:
    """Business logic for the shared role catalog."""

    def __init__(self, catalog: RoleCatalogRepository) -> None:
        self._catalog = catalog

    def seed_defaults(self) -> dict[str, int]:
        """Load the built-in role definitions, skipping names already present."""
        seeded = skipped = 0
        for data in DEFAULT_ROLES:
            role = RoleDefinition.model_validate(data)
            if self._catalog.find_by_name(role.role_name) is not None:
                skipped += 1
                continue
            self._catalog.save(role)
            seeded += 1
        CATALOG_ROLES.set(self._catalog.count())
        logger.info("Seeded %d role definitions, skipped %d existing", seeded, skipped)
        return {"seeded": seeded, "skipped": skipped, "total": len(DEFAULT_ROLES)}

    def record_usage(self, role_name: str) -> None:
        """Count a role being filled; unknown roles are ignored."""
        try:
            self._catalog.increment_usage(role_name)
        except Exception as exc:
            logger.warning("Could not record usage for '%s': %s", role_name, exc)

    def get_role_stats(self) -> dict[str, Any]:
        roles = self._catalog.get_all()
        by_category: dict[str, dict[str, Any]] = {}
        for role in roles:
            bucket = by_category.setdefault(role.category.value, {"count": 0, "usage": 0})
            bucket["count"] += 1
            bucket["usage"] += role.usage_count
        categories = sorted(
            (
                {
                    "category": category,
                    "count": data["count"],
                    "avg_usage": data["usage"] / data["count"],
                }
                for category, data in by_category.items()
            ),
            key=lambda c: -c["count"],
        )
        most_used = sorted(roles, key=lambda r: -r.usage_count)[:5]
        return {
            "total_roles": len(roles),
            "by_category": categories,
            "most_used": [
                {"role_name": r.role_name, "usage_count": r.usage_count} for r in most_used
            ],
        }
