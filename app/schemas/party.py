"""Customer and supplier request DTOs."""


from app.schemas.common import ApiModel

class CustomerCreate(ApiModel):
    customer_title: str | None = None
    customer_name: str = ""
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    other_contacts: str | None = None
    customer_type: str = ""

class CustomerUpdate(ApiModel):
    customer_title: str | None = None
    customer_name: str | None = None
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    other_contacts: str | None = None
    customer_type: str | None = None
    is_active: bool | None = None

class SupplierCreate(ApiModel):
    supplier_name: str = ""
    supplier_title: str | None = None
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    other_contacts: str | None = None
    supplier_type: str = ""
    country: str | None = None

class SupplierUpdate(ApiModel):
    supplier_name: str | None = None
    supplier_title: str | None = None
    contact_number: str | None = None
    email: str | None = None
    address: str | None = None
    other_contacts: str | None = None
    supplier_type: str | None = None
    country: str | None = None
    is_active: bool | None = None
