from commons.base_db import BaseDB


class ClientDao(BaseDB):
    """
    ClientDao 提供 client 表的建表、upsert 与清空操作。
    表以 name 为主键；同名客户端重复连接时覆盖为最新一条。
    """

    def ensure_table(self):
        """
        确保 client 表存在，不存在则创建。
        """
        create_table_sql = """
                           CREATE TABLE IF NOT EXISTS client
                           (
                               name                 VARCHAR(255) PRIMARY KEY,
                               msg_publish_count    INT     NOT NULL DEFAULT 0,
                               accumulated_msg_size BIGINT  NOT NULL DEFAULT 0,
                               platform             VARCHAR(64),
                               topic                VARCHAR(255)
                           ) ENGINE = InnoDB
                             DEFAULT CHARSET = utf8mb4;
                           """
        self.execute(create_table_sql, action="创建 client 表")
        self.logger.log_info("已确保 client 表存在")

    def upsert_client(self, name: str, msg_publish_count: int, accumulated_msg_size: int,
                      platform: str, topic: str):
        """
        插入或更新一条客户端统计（INSERT ... ON DUPLICATE KEY UPDATE）
        """
        upsert_sql = """
                     INSERT INTO client (name, msg_publish_count, accumulated_msg_size, platform, topic)
                     VALUES (%s, %s, %s, %s, %s)
                     ON DUPLICATE KEY UPDATE msg_publish_count=VALUES(msg_publish_count),
                                             accumulated_msg_size=VALUES(accumulated_msg_size),
                                             platform=VALUES(platform),
                                             topic=VALUES(topic)
                     """
        self.execute(upsert_sql, (name, msg_publish_count, accumulated_msg_size, platform, topic),
                     action=f"upsert client {name}")

    def delete_all(self):
        """清空 client 表"""
        self.execute("DELETE FROM client", action="清空 client 表")
