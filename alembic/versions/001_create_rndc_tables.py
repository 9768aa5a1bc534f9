"""Alembic migration — create the RNDC catalog, document and audit tables.

Lifecycle states are stored as VARCHAR with CHECK constraints (the ORM
maps them with ``native_enum=False``), so no CREATE TYPE is needed.
"""

from alembic import op

# revision identifiers
revision = "001_create_rndc_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── Configuración y consecutivos ────────────────────────────────────
    op.execute("""
        CREATE TABLE configuraciones (
            id                  SERIAL          PRIMARY KEY,
            usuario             VARCHAR(100)    NOT NULL,
            password            VARCHAR(200)    NOT NULL,
            empresa_nit         VARCHAR(20)     NOT NULL,
            endpoint_primary    VARCHAR(300)    NOT NULL,
            endpoint_backup     VARCHAR(300)    NOT NULL,
            timeout             INTEGER         NOT NULL DEFAULT 30000,
            activo              BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT now(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)
    # At most one active configuration
    op.execute(
        "CREATE UNIQUE INDEX uq_configuraciones_activo ON configuraciones (activo) WHERE activo;"
    )

    op.execute("""
        CREATE TABLE consecutivos (
            id              SERIAL          PRIMARY KEY,
            tipo            VARCHAR(20)     NOT NULL,
            anio            INTEGER         NOT NULL,
            ultimo_numero   INTEGER         NOT NULL DEFAULT 0,
            prefijo         VARCHAR(10),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT now(),
            CONSTRAINT uq_consecutivos_tipo_anio UNIQUE (tipo, anio)
        );
    """)

    # ── Catálogos ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE sedes (
            id                  SERIAL          PRIMARY KEY,
            codigo_sede         VARCHAR(20)     NOT NULL,
            nombre              VARCHAR(200)    NOT NULL,
            tipo_sede           VARCHAR(20)     NOT NULL DEFAULT 'granja',
            direccion           TEXT,
            municipio_codigo    VARCHAR(10)     NOT NULL,
            telefono            VARCHAR(50),
            valor_tonelada      NUMERIC(10, 2),
            activo              BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_sedes_codigo_sede ON sedes (codigo_sede);")
    op.execute("CREATE INDEX ix_sedes_nombre      ON sedes (nombre);")

    op.execute("""
        CREATE TABLE vehiculos (
            id                      SERIAL          PRIMARY KEY,
            placa                   VARCHAR(10)     NOT NULL UNIQUE,
            capacidad_carga         INTEGER         NOT NULL,
            configuracion           VARCHAR(100),
            clase                   VARCHAR(50),
            marca                   VARCHAR(50),
            modelo                  VARCHAR(50),
            propietario_tipo_doc    VARCHAR(2)      NOT NULL,
            propietario_numero_doc  VARCHAR(20)     NOT NULL,
            propietario_nombre      VARCHAR(200)    NOT NULL,
            tenedor_tipo_doc        VARCHAR(2),
            tenedor_numero_doc      VARCHAR(20),
            tenedor_nombre          VARCHAR(200),
            activo                  BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)

    op.execute("""
        CREATE TABLE terceros (
            id                          SERIAL          PRIMARY KEY,
            tipo_documento              VARCHAR(2)      NOT NULL,
            numero_documento            VARCHAR(20)     NOT NULL UNIQUE,
            nombre                      VARCHAR(200)    NOT NULL,
            apellido                    VARCHAR(200),
            razon_social                VARCHAR(200),
            direccion                   TEXT,
            telefono                    VARCHAR(50),
            email                       VARCHAR(200),
            municipio_codigo            VARCHAR(10),
            es_conductor                BOOLEAN         NOT NULL DEFAULT FALSE,
            es_propietario              BOOLEAN         NOT NULL DEFAULT FALSE,
            es_responsable_sede         BOOLEAN         NOT NULL DEFAULT FALSE,
            categoria_licencia          VARCHAR(5),
            numero_licencia             VARCHAR(30),
            fecha_vencimiento_licencia  DATE,
            activo                      BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)

    op.execute("""
        CREATE TABLE municipios (
            id              SERIAL          PRIMARY KEY,
            codigo          VARCHAR(10)     NOT NULL UNIQUE,
            nombre          VARCHAR(100)    NOT NULL,
            departamento    VARCHAR(100)    NOT NULL,
            activo          BOOLEAN         NOT NULL DEFAULT TRUE
        );
    """)

    # ── Remesas y manifiestos ───────────────────────────────────────────
    op.execute("""
        CREATE TABLE remesas (
            id                          SERIAL          PRIMARY KEY,
            consecutivo                 VARCHAR(20)     NOT NULL UNIQUE,
            codigo_sede_remitente       VARCHAR(20)     NOT NULL,
            codigo_sede_destinatario    VARCHAR(20)     NOT NULL,
            placa                       VARCHAR(10)     NOT NULL,
            cantidad_cargada            INTEGER         NOT NULL,
            fecha_cita_cargue           DATE            NOT NULL,
            fecha_cita_descargue        DATE            NOT NULL,
            conductor_id                VARCHAR(20)     NOT NULL,
            toneladas                   NUMERIC(8, 2),
            estado                      VARCHAR(30)     NOT NULL DEFAULT 'generada'
                CONSTRAINT remesa_estado CHECK (estado IN (
                    'generada','enviada','exitoso','error','cumplida','error_cumplimiento'
                )),
            xml_enviado                 TEXT,
            respuesta_rndc              TEXT,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_remesas_estado ON remesas (estado);")
    op.execute("CREATE INDEX ix_remesas_placa  ON remesas (placa);")

    op.execute("""
        CREATE TABLE manifiestos (
            id                  SERIAL          PRIMARY KEY,
            numero_manifiesto   VARCHAR(20)     NOT NULL UNIQUE,
            consecutivo_remesa  VARCHAR(20)     NOT NULL,
            fecha_expedicion    DATE            NOT NULL,
            municipio_origen    VARCHAR(10)     NOT NULL,
            municipio_destino   VARCHAR(10)     NOT NULL,
            placa               VARCHAR(10)     NOT NULL,
            conductor_id        VARCHAR(20)     NOT NULL,
            valor_flete         NUMERIC(12, 2),
            estado              VARCHAR(30)     NOT NULL DEFAULT 'generado'
                CONSTRAINT manifiesto_estado CHECK (estado IN (
                    'generado','exitoso','error','cumplido','error_cumplimiento'
                )),
            ingreso_id          VARCHAR(30),
            codigo_seguridad_qr VARCHAR(200),
            xml_enviado         TEXT,
            respuesta_rndc      TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_manifiestos_consecutivo_remesa ON manifiestos (consecutivo_remesa);")
    op.execute("CREATE INDEX ix_manifiestos_estado             ON manifiestos (estado);")

    # ── Auditoría ───────────────────────────────────────────────────────
    op.execute("""
        CREATE TABLE documentos (
            id                  SERIAL          PRIMARY KEY,
            tipo                VARCHAR(30)     NOT NULL
                CONSTRAINT documento_tipo CHECK (tipo IN (
                    'remesa','manifiesto','cumplimiento','cumplimiento_manifiesto',
                    'consulta_manifiesto'
                )),
            consecutivo         VARCHAR(20)     NOT NULL,
            xml_request         TEXT            NOT NULL,
            xml_response        TEXT,
            estado              VARCHAR(30)     NOT NULL DEFAULT 'pendiente'
                CONSTRAINT documento_estado CHECK (estado IN ('pendiente','exitoso','error')),
            mensaje_respuesta   TEXT,
            fecha_envio         TIMESTAMPTZ,
            datos_excel         JSONB,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_documentos_consecutivo ON documentos (consecutivo);")

    op.execute("""
        CREATE TABLE log_actividades (
            id          SERIAL          PRIMARY KEY,
            tipo        VARCHAR(10)     NOT NULL,
            modulo      VARCHAR(50)     NOT NULL,
            mensaje     TEXT            NOT NULL,
            detalles    JSONB,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT now()
        );
    """)
    op.execute("CREATE INDEX ix_log_actividades_created_at ON log_actividades (created_at);")


def downgrade() -> None:
    for table in (
        "log_actividades",
        "documentos",
        "manifiestos",
        "remesas",
        "municipios",
        "terceros",
        "vehiculos",
        "sedes",
        "consecutivos",
        "configuraciones",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table};")
