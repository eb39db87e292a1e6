from sqlalchemy.inspection import inspect

def sa_column_keys(model) -> set:
    return {col.key for col in inspect(model).columns}

def sa_update_from_dict(obj, data: dict, allow_fields=None):
    """อัปเดตค่าใน obj จาก dict (จำกัดฟิลด์ที่อนุญาตได้, ไม่รับ key ที่ไม่ใช่คอลัมน์)"""
    columns = sa_column_keys(obj.__class__)
    if allow_fields is None:
        allow_fields = data.keys()
    for k in allow_fields:
        if k in data and k in columns:
            setattr(obj, k, data[k])
    return obj
