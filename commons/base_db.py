import mysql.connector
from mysql.connector import pooling, Error
from commons.base_logger import BaseLogger
from contextlib import contextmanager
from mydataclass.db_config import DbConfig
from tools.retry_on_exception import retry_on_exception


class StorageUnavailableError(Error):
    """拿不到数据库连接（连接池与直连都失败）"""


class BaseDB:
    """
    数据库连接基类，提供连接池支持、日志记录、连接管理和上下文管理功能

    连接参数由调用方显式传入（启动时读取一次配置），不在每次调用时读文件。
    同一个 DbConfig 下的多个 DAO 共用同一个连接池。
    """

    # pool_name -> MySQLConnectionPool，多个 DAO 共享
    _pools: dict = {}

    def __init__(self, config: DbConfig, logger: BaseLogger | None = None):
        self.config = config
        self.logger = logger or BaseLogger(name='DB', to_file=True)

        self.connection_pool = None         # 连接池对象
        self._connection = None             # 单个连接（非连接池模式下使用）
        self.use_pool = True                # 是否启用连接池

        self._initialize_connection_pool()

    def _initialize_connection_pool(self):
        """
        尝试创建连接池，失败则退回到普通连接模式
        """
        pool_name = self.config.pool_name
        if pool_name in BaseDB._pools:
            self.connection_pool = BaseDB._pools[pool_name]
            self.use_pool = True
            return
        try:
            self.connection_pool = pooling.MySQLConnectionPool(
                pool_name=pool_name,
                pool_size=self.config.pool_size,
                **self.config.connect_kwargs(),
            )
            BaseDB._pools[pool_name] = self.connection_pool
            self.logger.log_info(f'成功创建数据库连接池 {pool_name} (size={self.config.pool_size})')
            self.use_pool = True
        except Error as e:
            self.logger.log_error(f'连接池创建失败，降级为普通连接: {e}')
            self.use_pool = False
            self.connection_pool = None

    def _connect_direct(self):
        """
        创建一个普通数据库连接（不使用连接池）
        """
        try:
            conn = mysql.connector.connect(autocommit=True, **self.config.connect_kwargs())
            self.logger.log_info('成功创建普通数据库连接')
            return conn
        except Error as e:
            self.logger.log_error(f'普通数据库连接失败: {e}', exc_info=True)
            return None

    @retry_on_exception()
    def get_connection(self):
        """
        获取数据库连接，根据是否启用连接池决定方式
        :raises StorageUnavailableError: 重试后仍拿不到连接
        """
        try:
            if self.use_pool and self.connection_pool:
                conn = self.connection_pool.get_connection()
                self.logger.log_debug('成功从连接池获取数据库连接')
                return conn
            conn = self._connect_direct()
        except Error as e:
            self.logger.log_error(f'获取数据库连接失败: {e}', exc_info=False)
            raise StorageUnavailableError(f'获取数据库连接失败: {e}') from e
        if conn is None:
            raise StorageUnavailableError('普通数据库连接失败')
        return conn

    def close_connection(self, conn):
        """
        安全关闭数据库连接；池化连接的 close() 会归还到池中
        """
        if conn:
            try:
                conn.close()
                self.logger.log_debug('数据库连接已成功关闭')
            except Error as e:
                self.logger.log_error(f'关闭数据库连接时发生错误: {e}', exc_info=True)

    @contextmanager
    def connection_ctx(self):
        """
        上下文管理器：自动获取并释放数据库连接
        用法：
            with db.connection_ctx() as conn:
                cursor = conn.cursor()
                ...
        """
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.close_connection(conn)

    def execute(self, sql: str, params: tuple = (), *, action: str = 'SQL'):
        """
        执行单条写语句并提交，返回影响行数。
        失败时记录日志并继续抛出，由调用方决定跳过还是中止。
        """
        with self.connection_ctx() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(sql, params)
                conn.commit()
                return cursor.rowcount
            except Error as e:
                self.logger.log_error(f'{action} 失败: {e}', exc_info=True)
                raise
            finally:
                cursor.close()

    def fetch_one(self, sql: str, params: tuple = ()):
        """查询单行（tuple），无结果返回 None"""
        with self.connection_ctx() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(sql, params)
                return cursor.fetchone()
            finally:
                cursor.close()
