"""
Pipeline de sincronización one-way: CMS -> base de datos espejo.

Dos caminos de entrada comparten el mismo núcleo:
- webhooks del CMS (cambios incrementales, uno por request)
- sync completo paginado (reconciliación, fallback)

Objetivos de diseño:
- Idempotencia: el external_id del CMS es la única clave de upsert.
- Un solo pipeline genérico, parametrizado por KindSyncConfig por tipo.
- Esquema explícito y tipado (sin blobs JSON).
- Mapeo puro (sin I/O) para poder testearlo fácilmente.
"""
