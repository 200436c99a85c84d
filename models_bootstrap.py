# models_bootstrap.py
# imported for its side effect: every model registered on Base.metadata
from organization import models as _org_models
from location import models as _location_models
from jobrole import models as _jobrole_models
from employee import models as _employee_models
from shift import models as _shift_models
