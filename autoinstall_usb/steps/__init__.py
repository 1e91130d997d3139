from .step_10_check_dependencies import CheckDependenciesStep
from .step_20_validate_config import ValidateConfigStep
from .step_30_locate_image import LocateImageStep
from .step_40_select_device import SelectDeviceStep
from .step_45_validate_device import ValidateDeviceStep
from .step_50_confirm import ConfirmStep
from .step_60_write_usb import WriteUsbStep
from .step_90_show_instructions import ShowInstructionsStep

__all__ = [
    "CheckDependenciesStep",
    "ValidateConfigStep",
    "LocateImageStep",
    "SelectDeviceStep",
    "ValidateDeviceStep",
    "ConfirmStep",
    "WriteUsbStep",
    "ShowInstructionsStep",
]
