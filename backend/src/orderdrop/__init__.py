"""OrderDrop - collect buyer files for an order into a seller-shared folder."""

__version__ = "0.1.0"
