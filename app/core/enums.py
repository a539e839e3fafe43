from enum import Enum


class EmployeeJobTitle(str, Enum):
    BUS = "Bus"


class BusFinanceStatus(str, Enum):
    PROFIT = "Profit"
    SHORTAGE = "Shortage"
