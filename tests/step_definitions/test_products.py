from pytest_bdd import scenarios
from common_steps import *

scenarios("../features/products.feature")
