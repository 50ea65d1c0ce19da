# import all models for Alembic
from capacity.db.models.engineer import Engineer
from capacity.db.models.catalogs import Customer, Program, ProjectManager
from capacity.db.models.project import Project
from capacity.db.models.license import License, ProjectLicense
from capacity.db.models.planning import PlanningEntry, PlanningChange
from capacity.db.models.import_run import ImportRun
from capacity.db.models.import_error import ImportError
